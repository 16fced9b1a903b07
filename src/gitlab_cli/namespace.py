"""
Namespace paths.

A namespace is the slash separated location of a group, subgroup, user or
project on a GitLab instance. Values are normalized on construction: no
leading or trailing slashes, lower-cased.
"""

import posixpath
from typing import List


def normalize(path: str) -> str:
    return path.strip("/").lower()


class Namespace(str):
    """A normalized namespace path."""

    def __new__(cls, path: str = ""):
        return super().__new__(cls, normalize(str(path)))

    def relative_to(self, root: str) -> "Namespace":
        """
        Strip the root prefix from this namespace.

        Only meaningful for namespaces inside root's subtree; a root that is
        not a prefix strips nothing.

        Args:
            root: Namespace to strip

        Returns:
            The remaining namespace
        """
        root = normalize(str(root))
        path = str(self)
        if path.startswith(root):
            path = path[len(root):]
        return Namespace(path)

    def join(self, *segments: str) -> "Namespace":
        """Append segments, collapsing redundant separators."""
        parts = [str(self)] + [s.strip("/") for s in segments if s.strip("/")]
        if not any(parts):
            return Namespace("")
        joined = posixpath.normpath(posixpath.join(*parts))
        if joined == ".":
            joined = ""
        return Namespace(joined)

    def with_child(self, name: str) -> "Namespace":
        return self.join(name)

    def segments(self) -> List[str]:
        if not self:
            return []
        return str(self).split("/")

    def __repr__(self) -> str:
        return f"Namespace({str(self)!r})"


def extract_namespace(full_path: str) -> Namespace:
    """Return the namespace holding full_path (empty for top-level paths)."""
    full_path = normalize(full_path)
    parent, sep, _ = full_path.rpartition("/")
    if not sep:
        return Namespace("")
    return Namespace(parent)

"""
Project tree nodes.

A tree is made of exactly three kinds of nodes: projects (leaves), groups and
users (containers). Users are always the root of their tree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvariantViolation
from .namespace import Namespace, extract_namespace


@dataclass(frozen=True)
class ProjectRecord:
    """A project as listed by the GitLab API."""

    name: str
    path_with_namespace: str
    namespace: str
    archived: bool = False
    description: str = ""
    http_url_to_repo: str = ""
    ssh_url_to_repo: str = ""

    @classmethod
    def from_gitlab(cls, project: Any) -> "ProjectRecord":
        """
        Create a record from a python-gitlab project object.

        Args:
            project: Project, GroupProject or UserProject object

        Returns:
            ProjectRecord with the attributes the tree needs
        """
        namespace = getattr(project, "namespace", None) or {}
        if isinstance(namespace, dict):
            namespace_path = namespace.get("full_path", "")
        else:
            namespace_path = getattr(namespace, "full_path", "")

        return cls(
            name=project.name,
            path_with_namespace=project.path_with_namespace,
            namespace=namespace_path,
            archived=bool(getattr(project, "archived", False)),
            description=getattr(project, "description", None) or "",
            http_url_to_repo=getattr(project, "http_url_to_repo", None) or "",
            ssh_url_to_repo=getattr(project, "ssh_url_to_repo", None) or "",
        )


class ProjectNode(ABC):
    """A node in a project tree."""

    is_container = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name. May be stylised, e.g. contain capital letters."""

    @property
    @abstractmethod
    def namespace(self) -> Namespace:
        """Namespace the node lives in."""

    @property
    @abstractmethod
    def full_path(self) -> Namespace:
        """Namespace plus the node's own path segment."""

    @property
    def depth(self) -> int:
        return len(self.namespace.segments())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.full_path)!r})"


class ContainerNode(ProjectNode):
    """A node that holds sub-nodes: groups and users."""

    is_container = True

    def __init__(self):
        self._nodes: List[ProjectNode] = []
        self._by_name: Dict[str, ProjectNode] = {}

    @property
    def nodes(self) -> Tuple[ProjectNode, ...]:
        return tuple(self._nodes)

    def add_nodes(self, *nodes: ProjectNode) -> None:
        for node in nodes:
            if node.name in self._by_name:
                raise InvariantViolation(
                    f"{str(self.full_path)!r} already has a node named {node.name!r}"
                )
            self._nodes.append(node)
            self._by_name[node.name] = node

    def get_node(self, name: str) -> Optional[ProjectNode]:
        return self._by_name.get(name)

    def num_nodes(self, include_archived: bool) -> int:
        """
        Count direct sub-nodes.

        Args:
            include_archived: Whether archived projects are counted

        Returns:
            Number of sub-nodes
        """
        if include_archived:
            return len(self._nodes)
        return sum(1 for n in self._nodes if not (isinstance(n, Project) and n.archived))

    def sort_nodes(self) -> None:
        self._nodes.sort(key=lambda n: n.name)


class Project(ProjectNode):
    """A GitLab project, always a leaf."""

    def __init__(self, record: ProjectRecord):
        self.record = record

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def namespace(self) -> Namespace:
        return Namespace(self.record.namespace)

    @property
    def full_path(self) -> Namespace:
        return Namespace(self.record.path_with_namespace)

    @property
    def archived(self) -> bool:
        return self.record.archived

    @property
    def description(self) -> str:
        return self.record.description

    @property
    def clone_urls(self) -> Tuple[str, ...]:
        return tuple(u for u in (self.record.ssh_url_to_repo, self.record.http_url_to_repo) if u)


class Group(ContainerNode):
    """A group or subgroup."""

    def __init__(self, name: str, namespace: str, full_path: str):
        super().__init__()
        self._name = name
        self._namespace = Namespace(namespace)
        # may differ from namespace/name when the name has capital letters
        self._full_path = Namespace(full_path)

    @classmethod
    def from_gitlab(cls, group: Any) -> "Group":
        return cls(
            name=group.name,
            namespace=extract_namespace(group.full_path),
            full_path=group.full_path,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def full_path(self) -> Namespace:
        return self._full_path


class User(ContainerNode):
    """A user namespace. Always the root of its tree."""

    def __init__(self, username: str, fullname: str = ""):
        super().__init__()
        self.username = username
        self.fullname = fullname

    @classmethod
    def from_gitlab(cls, user: Any) -> "User":
        return cls(username=user.username, fullname=getattr(user, "name", "") or "")

    @property
    def name(self) -> str:
        return self.username

    @property
    def namespace(self) -> Namespace:
        return Namespace("")

    @property
    def full_path(self) -> Namespace:
        return Namespace(self.username)

    @property
    def depth(self) -> int:
        return 0

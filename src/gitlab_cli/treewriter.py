"""
Draw trees the way the `tree` command does:

    ├─ gitlab
    │  ├─ client.py
    │  └─ cloner.py
    └─ tests
       └─ test_tree.py

A writer decorates the elements of one level. sub() returns the writer for
the elements below the element that was written last.
"""

LIST_ITEM = "│  "
MID_ITEM = "├─ "
LAST_ITEM = "└─ "
NO_ITEM = "   "


class RootWriter:
    """Writes the topmost element, which gets no decoration."""

    def element(self, name: str) -> str:
        return name

    def sub(self, elements: int) -> "SubWriter":
        return SubWriter(elements)


class SubWriter:
    """
    Writes the elements of one level below the root.

    It needs to know how many elements it will write to pick the glyph for
    the last one. Writing more elements than announced produces garbage.
    """

    def __init__(self, elements: int, prefix: str = ""):
        self.expected_elements = elements
        self.next_element = 1
        self.prefix = prefix

    def is_last(self) -> bool:
        return self.next_element >= self.expected_elements

    def element(self, name: str) -> str:
        glyph = LAST_ITEM if self.is_last() else MID_ITEM
        self.next_element += 1
        return self.prefix + glyph + name

    def sub(self, elements: int) -> "SubWriter":
        # the last element of this level is already written, so nothing
        # continues below it
        if self.next_element > self.expected_elements:
            return SubWriter(elements, self.prefix + NO_ITEM)
        return SubWriter(elements, self.prefix + LIST_ITEM)


def new() -> RootWriter:
    return RootWriter()

"""
Build a project tree out of a flat list of projects.

GitLab lists all projects below a group, including those of subgroups, but
never the subgroups themselves. The groups in between the root and a project
are therefore reconstructed from the project's path.
"""

from typing import Iterable

from .errors import InvariantViolation
from .namespace import Namespace
from .nodes import ContainerNode, Group, Project, ProjectNode, ProjectRecord
from .walker import walk


def add_sub_projects(root: ContainerNode, records: Iterable[ProjectRecord]) -> None:
    """
    Add projects to the tree below root, creating missing groups.

    After all projects are added, the sub-nodes of every container are
    sorted by name.

    Args:
        root: Root of the tree; modified in place
        records: Projects below root, in any order

    Raises:
        InvariantViolation: A path is claimed by a project and a group, a
            project is listed twice, or a project is not below root
    """
    for record in records:
        segments = Namespace(record.path_with_namespace).relative_to(root.full_path).segments()
        if not segments:
            raise InvariantViolation(
                f"project {record.path_with_namespace!r} is not below {str(root.full_path)!r}"
            )

        group = root
        for i, segment in enumerate(segments):
            if i == len(segments) - 1:
                group.add_nodes(Project(record))
                break

            node = group.get_node(segment)
            if node is None:
                # projects only carry the path of their namespace, not the
                # names of the groups in it, so the path segment is the name.
                sub_group = Group(
                    name=segment,
                    namespace=group.full_path,
                    full_path=group.full_path.with_child(segment),
                )
                group.add_nodes(sub_group)
                group = sub_group
            elif isinstance(node, ContainerNode):
                group = node
            else:
                raise InvariantViolation(
                    f"node {str(node.full_path)!r} found but is project, not group"
                )

    walk(root, _sort)


def _sort(node: ProjectNode) -> None:
    if isinstance(node, ContainerNode):
        node.sort_nodes()

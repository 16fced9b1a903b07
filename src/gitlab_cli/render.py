"""
Print a project tree as a table:

    name           type      group
    ----           ----      -----
    mygroup        group     test
    ├─ build       group     test/mygroup
    │  └─ bazel    project   test/mygroup/build
    └─ myproject   project   test/mygroup
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, TextIO

from . import treewriter
from .errors import InvariantViolation
from .namespace import Namespace
from .nodes import ContainerNode, Project, ProjectNode
from .table import Table
from .walker import walk

ARCHIVED = " (archived)"
PROJECT = "project"
GROUP = "group"


@dataclass
class PrintOptions:
    """What to print. A depth of 0 prints all levels."""

    print_archived: bool = False
    print_description: bool = False
    depth: int = 0


def print_project(root: ProjectNode, opts: Optional[PrintOptions] = None,
                  logger: Optional[logging.Logger] = None) -> str:
    """
    Render a project tree.

    Args:
        root: Root of the tree
        opts: PrintOptions, defaults print everything but archived projects
        logger: Optional logger instance

    Returns:
        The rendered table, one line per printed node
    """
    opts = opts or PrintOptions()
    logger = logger or logging.getLogger('gitlab_cli.render')

    table = Table(min_width=4, padding=3)
    if opts.print_description:
        table.add_row("name", "type", "group", "description")
        table.add_row("----", "----", "-----", "-----------")
    else:
        table.add_row("name", "type", "group")
        table.add_row("----", "----", "-----")

    def add_row(name: str, typ: str, ns: Namespace, description: str = "") -> None:
        if opts.print_description:
            table.add_row(name, typ, ns, description)
        else:
            table.add_row(name, typ, ns)

    writers: Dict[Namespace, object] = {root.namespace: treewriter.new()}

    def depth_reached(depth: int) -> bool:
        if opts.depth == 0:
            return False
        return depth - root.depth > opts.depth

    if opts.print_archived:
        logger.debug("printing archived repositories too")

    def visit(node: ProjectNode) -> None:
        if depth_reached(node.depth):
            return

        tw = writers.get(node.namespace)
        if tw is None:
            raise InvariantViolation(f"no writer for {node!r} (namespace {node.namespace!r})")

        if isinstance(node, Project):
            typ = PROJECT
            if node.archived:
                if not opts.print_archived:
                    return
                typ += ARCHIVED
            add_row(tw.element(node.name), typ, node.namespace, node.description)

        elif isinstance(node, ContainerNode):
            add_row(tw.element(node.name), GROUP, node.namespace)
            writers[node.full_path] = tw.sub(node.num_nodes(opts.print_archived))

    walk(root, visit)
    return table.render()


def write_project(root: ProjectNode, opts: Optional[PrintOptions], stream: TextIO) -> None:
    """Render a project tree into stream."""
    stream.write(print_project(root, opts))

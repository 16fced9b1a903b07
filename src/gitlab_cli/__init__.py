"""
GitLab CLI - list and clone the project trees of GitLab groups and users.

This package provides:
- GitlabClient: Fetch a group or user with all projects below it as a tree
- print_project: Render a project tree as a table
- Cloner: Mirror a project tree into a local directory
"""

__version__ = "1.0.0"

from .client import GitlabClient
from .cloner import Cloner
from .config import Config
from .namespace import Namespace
from .nodes import Group, Project, ProjectRecord, User
from .render import PrintOptions, print_project
from .tree import add_sub_projects
from .walker import CancelToken, walk, walk_concurrent

__all__ = [
    "GitlabClient",
    "Cloner",
    "Config",
    "Namespace",
    "Group",
    "Project",
    "ProjectRecord",
    "User",
    "PrintOptions",
    "print_project",
    "add_sub_projects",
    "CancelToken",
    "walk",
    "walk_concurrent",
]

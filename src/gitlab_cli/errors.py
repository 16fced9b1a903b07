"""
Error types for GitLab CLI.

Everything a user can cause or fix derives from GitlabCliError. Broken
assumptions about the shape of the project tree raise InvariantViolation,
which is intentionally kept out of that hierarchy so it is never handled
like an ordinary failure.
"""

from typing import Any


class GitlabCliError(Exception):
    """Base class for user-facing errors."""


class InvariantViolation(RuntimeError):
    """Internal error: the project tree is not shaped the way it must be."""


class ConfigError(GitlabCliError):
    """The configuration file or a value in it is invalid."""


class InvalidContextError(ConfigError):
    """A context (or the instance it points to) does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'invalid context "{name}" does not exist')


class NamespaceNotFoundError(GitlabCliError):
    """Neither a namespace nor a project exists at the requested path."""


class UnknownNamespaceKindError(GitlabCliError):
    """GitLab returned a namespace kind other than group or user."""


class OperationCancelledError(GitlabCliError):
    """The operation was cancelled before it could complete."""


class RemoteNotFoundError(GitlabCliError):
    """No configured git remote matches the clone URLs of a project."""


class WalkError(GitlabCliError):
    """A visitor failed on a node during a tree walk."""

    def __init__(self, node: Any, message: str = "could not walk node"):
        self.node = node
        kind = type(node).__name__.lower()
        super().__init__(f"{message} {kind} {str(node.full_path)!r}")


class CloneError(GitlabCliError):
    """A project could not be cloned or pulled, or a folder not created."""

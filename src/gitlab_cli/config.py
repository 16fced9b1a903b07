"""
Configuration module for GitLab CLI.

The configuration file holds instances (GitLab servers and how to log in to
them) and contexts (an instance together with the group or user that is the
root of every operation), plus the name of the current context.
"""

import base64
import json
import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import SplitResult, urlsplit

import gitlab
from git import Repo

from .client import GitlabClient
from .cloner import open_repository
from .errors import ConfigError, InvalidContextError

TOKEN = "token"
BASIC_AUTH = "basic-auth"

LOCAL_PATH = "."
ORIGIN = "origin"

# Default configuration values
DEFAULT_CONFIG = {
    "concurrent_clones": 8,  # Number of concurrent clone operations
}


@dataclass
class Authentication:
    """Credentials for an instance, used for the API and for git."""

    type: str = TOKEN
    token: str = ""
    username: str = ""
    password: str = ""

    def to_dict(self) -> Dict[str, Any]:
        if self.type == BASIC_AUTH:
            return {'type': self.type, 'username': self.username, 'password': self.password}
        return {'type': self.type, 'token': self.token}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Authentication':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def git_credentials(self) -> tuple:
        if self.type == BASIC_AUTH:
            return self.username, self.password
        # GitLab accepts any user name together with an access token
        return "oauth2", self.token

    def git_environment(self) -> Dict[str, str]:
        """
        Environment that makes git send the credentials over HTTP.

        Returns:
            GIT_CONFIG_* variables setting an Authorization extra header
        """
        username, password = self.git_credentials()
        basic = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return {
            "GIT_CONFIG_COUNT": "1",
            "GIT_CONFIG_KEY_0": "http.extraHeader",
            "GIT_CONFIG_VALUE_0": f"Authorization: Basic {basic}",
        }

    def gitlab_kwargs(self) -> Dict[str, str]:
        if self.type == BASIC_AUTH:
            return {'http_username': self.username, 'http_password': self.password}
        return {'private_token': self.token}


@dataclass
class InstanceConfig:
    """A GitLab server."""

    host: str
    authentication: Authentication = field(default_factory=Authentication)

    @property
    def url(self) -> str:
        return f"https://{self.host}"


@dataclass
class Context:
    """An instance together with the namespace operations start from."""

    instance: str
    group: str = ""
    user: str = ""
    instance_config: Optional[InstanceConfig] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, str]:
        data = {'instance': self.instance}
        if self.group:
            data['group'] = self.group
        if self.user:
            data['user'] = self.user
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Context':
        return cls(
            instance=data.get('instance', ''),
            group=data.get('group', ''),
            user=data.get('user', ''),
        )

    @property
    def namespace(self) -> str:
        return self.group or self.user

    @property
    def authentication(self) -> Authentication:
        if self.instance_config is None:
            raise ConfigError(f"context has no instance {self.instance!r}")
        return self.instance_config.authentication

    def with_group(self, group: str) -> 'Context':
        """Return a copy of the context with the new group set."""
        return Context(
            instance=self.instance,
            group=group,
            user=self.user,
            instance_config=self.instance_config,
        )

    def gitlab_client(self, logger: Optional[logging.Logger] = None) -> GitlabClient:
        """Create a GitLab client for the namespace of the context."""
        auth = self.authentication
        gl = gitlab.Gitlab(self.instance_config.url, **auth.gitlab_kwargs())
        return GitlabClient(gl, self.namespace, logger=logger)


class Config:
    """Configuration manager for GitLab CLI."""

    def __init__(self, config_file: Optional[str] = None, use_config_context: bool = False,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize configuration.

        A missing configuration file is created with default values.

        Args:
            config_file: Path to configuration file (optional)
            use_config_context: Ignore the git repository in the working
                directory when resolving the current context
            logger: Optional logger instance
        """
        self.config_file = config_file or self._get_default_config_path()
        self.use_config_context = use_config_context
        self.logger = logger or logging.getLogger('gitlab_cli.config')

        created = not os.path.exists(self.config_file)
        self.config = self._load_config()

        self.instances: Dict[str, InstanceConfig] = {
            host: InstanceConfig(host, Authentication.from_dict(data.get('authentication') or {}))
            for host, data in (self.config.pop('instances', None) or {}).items()
        }
        self.contexts: Dict[str, Context] = {
            name: Context.from_dict(data)
            for name, data in (self.config.pop('contexts', None) or {}).items()
        }
        self.current_context: str = self.config.pop('currentContext', '')
        self.prefer_config_context: bool = self.config.pop('preferContext', False)

        if created and not self.save_config():
            raise ConfigError(f"could not create config file {self.config_file}")

    def _get_default_config_path(self) -> str:
        """Get default configuration file path."""
        return os.path.join(os.path.expanduser("~"), ".gitlab-cli.json")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, creating it if it does not exist."""
        if not os.path.exists(self.config_file):
            return dict(DEFAULT_CONFIG)

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"could not load config file {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"config file {self.config_file} does not hold an object")
        return {**DEFAULT_CONFIG, **data}

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.config)
        data['instances'] = {
            host: {'authentication': inst.authentication.to_dict()}
            for host, inst in self.instances.items()
        }
        data['contexts'] = {name: ctx.to_dict() for name, ctx in self.contexts.items()}
        data['currentContext'] = self.current_context
        if self.prefer_config_context:
            data['preferContext'] = True
        return data

    def save_config(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if successful, False otherwise
        """
        try:
            fd = os.open(self.config_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except IOError as e:
            self.logger.error(f"Failed to save config file {self.config_file}: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def validate_access_token(self, token: str) -> bool:
        if not token:
            return False

        # GitLab personal access tokens typically start with 'glpat-'
        # But we'll accept any non-empty string for flexibility
        return len(token.strip()) > 0

    def get_current_context(self) -> Context:
        """
        Return the context operations should use.

        Unless the configured context is preferred, a git repository in the
        working directory whose origin points to a known instance yields a
        temporary context for that instance and the repository's path.

        Raises:
            InvalidContextError: The current context or its instance does
                not exist
            ConfigError: The git repository does not match any instance
        """
        if self.prefer_config_context or self.use_config_context:
            self.logger.debug("preferring config context")
            return self._get_current_config_context()

        repo = open_repository(LOCAL_PATH)
        if repo is not None:
            self.logger.debug("currently in git repo, creating git context")
            return self._new_git_repo_context(repo)

        self.logger.debug("not in git repo, using default context")
        return self._get_current_config_context()

    def _get_current_config_context(self) -> Context:
        ctx = self.contexts.get(self.current_context)
        if ctx is None:
            raise InvalidContextError(self.current_context)

        ctx.instance_config = self.instances.get(ctx.instance)
        if ctx.instance_config is None:
            raise InvalidContextError(self.current_context)

        self.logger.debug(f"Using context {self.current_context!r}")
        return ctx

    def _new_git_repo_context(self, repo: Repo) -> Context:
        try:
            remote = repo.remote(ORIGIN)
            remote_url = next(iter(remote.urls))
        except (ValueError, StopIteration) as e:
            raise ConfigError("could not generate context from git repository") from e

        repo_url = parse_git_url(remote_url)
        self.logger.debug(f"found repo remote: {repo_url.geturl()}")

        for name, inst in self.instances.items():
            if repo_url.hostname == inst.host.lower():
                self.logger.debug(
                    f"repo URL matches instance {name!r}, creating context with group {repo_url.path}"
                )
                return Context(instance=name, group=repo_url.path, instance_config=inst)

        raise ConfigError(f"no instance match found for git repository {repo_url.geturl()!r}")


GIT_SSH_IMPLICIT = "git@"
GIT_SSH_EXPLICIT = "ssh://"
GIT_HTTPS = "https://"
GIT_SUFFIX = ".git"


def parse_git_url(git_url: str) -> SplitResult:
    """
    Parse a git remote URL into an HTTPS URL.

    Args:
        git_url: SSH (git@host:path.git, ssh://git@host/path.git) or HTTPS
            remote URL

    Returns:
        The parsed URL, its path without the .git suffix

    Raises:
        ConfigError: Unknown remote URL format
    """
    if git_url.startswith(GIT_SSH_EXPLICIT):
        git_url = git_url[len(GIT_SSH_EXPLICIT):]
    if git_url.endswith(GIT_SUFFIX):
        git_url = git_url[:-len(GIT_SUFFIX)]

    if git_url.startswith(GIT_SSH_IMPLICIT):
        git_url = git_url[len(GIT_SSH_IMPLICIT):].replace(":", "/", 1)
        git_url = GIT_HTTPS + git_url
    elif not git_url.startswith(GIT_HTTPS):
        raise ConfigError(f"unknown git remote URL format: {git_url!r}")

    return urlsplit(git_url)


def get_absolute_group_path(current_group: str, new_group: str) -> str:
    """
    Resolve new_group against current_group.

    Groups starting with a "/" are absolute, all others are relative to
    current_group.
    """
    if new_group.startswith("/"):
        return new_group.strip("/")

    joined = posixpath.join(current_group or "", new_group or "")
    if not joined:
        return ""
    joined = posixpath.normpath(joined).strip("/")
    return "" if joined == "." else joined

#!/usr/bin/env python3
"""
GitLab Repository Cloner

Mirrors a project tree into a local directory: groups become folders,
projects are cloned, or pulled if a working copy already exists.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from .errors import CloneError, RemoteNotFoundError
from .namespace import Namespace
from .nodes import ContainerNode, Project, ProjectNode, ProjectRecord
from .walker import CancelToken


def _environment(auth: Any) -> Dict[str, str]:
    if auth is None:
        return {}
    return auth.git_environment()


def open_repository(path: Path) -> Optional[Repo]:
    """
    Open the working copy at path.

    Returns:
        GitPython Repo object, or None if path is not a git repository
    """
    try:
        return Repo(path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None


def determine_remote(repo: Repo, record: ProjectRecord) -> str:
    """
    Find the remote that points to the project.

    Args:
        repo: GitPython Repo object
        record: Project whose clone URLs are matched against the remotes

    Returns:
        Name of the first remote with a matching URL

    Raises:
        RemoteNotFoundError: No remote matches
    """
    known = {record.ssh_url_to_repo, record.http_url_to_repo} - {""}
    for remote in repo.remotes:
        for url in remote.urls:
            if url in known:
                return remote.name

    raise RemoteNotFoundError("could not determine remote, maybe not configured")


def pull(repo: Repo, record: ProjectRecord, auth: Any = None) -> None:
    """Pull the remote of the project into the active branch of repo."""
    remote = determine_remote(repo, record)
    with repo.git.custom_environment(**_environment(auth)):
        repo.remote(remote).pull()


def clone(url: str, path: Path, auth: Any = None) -> Repo:
    return Repo.clone_from(url, str(path), env=_environment(auth))


class Cloner:
    """Walk visitor that clones projects and creates group folders."""

    def __init__(self, root_path: str, skip_root: bool, auth: Any,
                 destination: str = ".", logger: Optional[logging.Logger] = None):
        """
        Initialize the cloner.

        Args:
            root_path: Namespace stripped from full paths to get local paths
            skip_root: Don't create a folder for the group at root_path
            auth: Credentials handed to git, see config.Authentication
            destination: Local directory the tree is mirrored into
            logger: Optional logger instance
        """
        self.root_path = Namespace(root_path)
        self.skip_root = skip_root
        self.auth = auth
        self.destination = Path(destination)
        self.logger = logger or logging.getLogger('gitlab_cli.cloner')

        self._stats_lock = threading.Lock()
        self.stats = {
            'repositories_cloned': 0,
            'repositories_updated': 0,
            'groups_created': 0,
        }

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    def target_path(self, node: ProjectNode) -> Path:
        relative = node.full_path.relative_to(self.root_path)
        return self.destination.joinpath(*relative.segments())

    def visit(self, token: CancelToken, node: ProjectNode) -> None:
        if isinstance(node, Project):
            self.clone_project(node)
        elif isinstance(node, ContainerNode):
            self.create_group_folder(node)

    def clone_project(self, project: Project) -> None:
        """
        Clone a project, or pull updates if it already exists.

        Raises:
            CloneError: Cloning or pulling failed
            RemoteNotFoundError: The existing working copy has no remote
                pointing to the project
        """
        path = self.target_path(project)

        repo = open_repository(path)
        if repo is not None:
            self.logger.debug(f"Pulling {project.name} in {path}")
            try:
                pull(repo, project.record, self.auth)
            except GitCommandError as e:
                raise CloneError(f"could not pull existing repo at {path}: {e}") from e
            self._count('repositories_updated')
            self.logger.info(f"Updated {project.name} in {path}")
            return

        self.logger.debug(f"Cloning {project.name} to {path}")
        try:
            clone(project.record.http_url_to_repo, path, self.auth)
        except GitCommandError as e:
            raise CloneError(f"could not clone project {project.name}: {e}") from e

        self._count('repositories_cloned')
        self.logger.info(f"Cloned {project.name} to {path}")

    def create_group_folder(self, group: ContainerNode) -> None:
        if self.skip_root and group.full_path == self.root_path:
            return

        path = self.target_path(group)
        self.logger.debug(f"Creating folder {path} for group {group.name}")
        try:
            path.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise CloneError(f"could not create folder for group {group.name}: {e}") from e
        self._count('groups_created')

    def print_statistics(self) -> None:
        """Log cloning statistics."""
        self.logger.info("=" * 50)
        self.logger.info("CLONING STATISTICS")
        self.logger.info("=" * 50)
        self.logger.info(f"Groups processed: {self.stats['groups_created']}")
        self.logger.info(f"Repositories cloned: {self.stats['repositories_cloned']}")
        self.logger.info(f"Repositories updated: {self.stats['repositories_updated']}")
        self.logger.info("=" * 50)

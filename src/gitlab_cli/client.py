"""
Access to the GitLab API.

Wraps python-gitlab to fetch a namespace, be it a group, a user or a single
project, together with every project below it as a project tree.
"""

import logging
from typing import Any, List, Optional

import gitlab
import requests

from .errors import (
    GitlabCliError,
    NamespaceNotFoundError,
    OperationCancelledError,
    UnknownNamespaceKindError,
)
from .namespace import normalize
from .nodes import Group, Project, ProjectNode, ProjectRecord, User
from .tree import add_sub_projects
from .walker import CancelToken

# maximum page size allowed by GitLab
PER_PAGE = 100


class GitlabClient:
    """Fetches project trees of one namespace."""

    def __init__(self, gl: gitlab.Gitlab, namespace: str, logger: Optional[logging.Logger] = None):
        """
        Initialize the client.

        Args:
            gl: Connected python-gitlab instance
            namespace: Path of a group, user or project
            logger: Optional logger instance
        """
        self.gl = gl
        self.namespace = normalize(namespace)
        self.logger = logger or logging.getLogger('gitlab_cli.client')

    def get_projects(self, token: Optional[CancelToken] = None,
                     include_archived: bool = False) -> ProjectNode:
        """
        Get the project tree of the namespace.

        Args:
            token: Cancels listing projects when cancelled
            include_archived: Also fetch archived projects

        Returns:
            A Group or User holding all projects below it, or a single
            Project if the namespace is a project

        Raises:
            NamespaceNotFoundError: No such namespace or project
            UnknownNamespaceKindError: The namespace is neither group nor user
            OperationCancelledError: token was cancelled while listing
            GitlabCliError: The API could not be reached or returned an error
        """
        try:
            return self._get_projects(token, include_archived)
        except requests.exceptions.ConnectionError as e:
            raise GitlabCliError(f"could not connect to {self.gl.url}: {e}") from e
        except gitlab.exceptions.GitlabError as e:
            raise GitlabCliError(
                f"could not get namespace or project {self.namespace}: {e.error_message}"
            ) from e

    def _get_projects(self, token: Optional[CancelToken], include_archived: bool) -> ProjectNode:
        try:
            ns = self.gl.namespaces.get(self.namespace)
        except gitlab.exceptions.GitlabGetError as e:
            if e.response_code != 404:
                raise
            # the namespace may not exist, or it may be a project.
            return self._get_project()

        if ns.kind == 'group':
            return self._get_group(token, include_archived)
        if ns.kind == 'user':
            return self._get_user(token, include_archived)
        raise UnknownNamespaceKindError(f"unknown kind: {ns.kind}")

    def _get_project(self) -> Project:
        try:
            project = self.gl.projects.get(self.namespace, statistics=True)
        except gitlab.exceptions.GitlabGetError as e:
            if e.response_code != 404:
                raise
            raise NamespaceNotFoundError(f"no such namespace or project: {self.namespace}") from e

        return Project(ProjectRecord.from_gitlab(project))

    def _get_group(self, token: Optional[CancelToken], include_archived: bool) -> Group:
        group = self.gl.groups.get(self.namespace)
        self.logger.info(f"Found group: {group.name} (ID: {group.id})")

        root = Group.from_gitlab(group)
        records = self._list_projects(group.projects, token, include_subgroups=True, archived=False)
        if include_archived:
            records += self._list_projects(group.projects, token, include_subgroups=True, archived=True)

        add_sub_projects(root, records)
        return root

    def _get_user(self, token: Optional[CancelToken], include_archived: bool) -> User:
        users = self.gl.users.list(username=self.namespace)
        if not users:
            raise NamespaceNotFoundError(f"did not find user {self.namespace}")
        if len(users) > 1:
            self.logger.info(
                f"found more than one user with the username {self.namespace}, "
                f"using first one: {users[0].name}"
            )

        user = users[0]
        root = User.from_gitlab(user)
        records = self._list_projects(user.projects, token, archived=False)
        if include_archived:
            records += self._list_projects(user.projects, token, archived=True)

        add_sub_projects(root, records)
        return root

    def _list_projects(self, manager: Any, token: Optional[CancelToken], **filters) -> List[ProjectRecord]:
        """
        List all projects of a project manager, page by page.

        Args:
            manager: python-gitlab GroupProjectManager or UserProjectManager
            token: Cancels listing when cancelled
            **filters: Filters passed to the API

        Returns:
            All listed projects; nothing is returned if a page fails
        """
        projects = manager.list(iterator=True, per_page=PER_PAGE, **filters)

        records = []
        page = None
        for project in projects:
            if token is not None and token.cancelled:
                raise OperationCancelledError("listing projects was cancelled")

            if projects.current_page != page:
                page = projects.current_page
                self.logger.debug(f"getting page {page} of {projects.total_pages} from the API")

            records.append(ProjectRecord.from_gitlab(project))

        self.logger.debug(f"got all {len(records)} results from the API")
        return records

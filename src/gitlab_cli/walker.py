"""
Depth-first walks over a project tree.

walk() visits nodes one after another in name order and stops at the first
failing visit. walk_concurrent() visits the children of every node in a
thread pool once the node itself has been visited, and stops scheduling new
visits as soon as one fails or the caller cancels.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from .errors import InvariantViolation, WalkError
from .nodes import ProjectNode

DEFAULT_WORKERS = 8

Visitor = Callable[[ProjectNode], None]
ContextVisitor = Callable[["CancelToken", ProjectNode], None]


class CancelToken:
    """
    Cooperative cancellation signal.

    A token created with a parent counts as cancelled once either itself or
    any of its ancestors is cancelled; cancelling it never affects the parent.
    """

    def __init__(self, parent: Optional["CancelToken"] = None):
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def child(self) -> "CancelToken":
        return CancelToken(parent=self)


def _call(node: ProjectNode, visit: Callable, *args) -> None:
    try:
        visit(*args, node)
    except InvariantViolation:
        raise
    except Exception as e:
        raise WalkError(node) from e


def walk(root: ProjectNode, visit: Visitor) -> None:
    """
    Walk a tree depth-first, visiting every node before its children.

    Args:
        root: Node to start at
        visit: Called once per node

    Raises:
        WalkError: The first failing visit, chained to the visitor's exception
    """
    _call(root, visit)

    if not root.is_container:
        return

    for node in root.nodes:
        walk(node, visit)


def walk_concurrent(
    token: CancelToken,
    root: ProjectNode,
    visit: ContextVisitor,
    max_workers: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Walk a tree depth-first, visiting sub-nodes concurrently.

    The root is visited in the calling thread. Every other node is visited in
    a worker thread, scheduled only after its parent's visit succeeded. All
    visits share one cancellation scope derived from token: the first failing
    visit cancels it, so visits that have not started yet are skipped while
    running ones finish. Only that first error is raised; errors of visits
    that were already running are discarded.

    A token that is already cancelled, or gets cancelled by the caller, ends
    the walk early without an error.

    Args:
        token: Cancellation token of the caller
        root: Node to start at
        visit: Called with the walk's token and the node
        max_workers: Size of the thread pool (DEFAULT_WORKERS if not given)
        logger: Optional logger instance

    Raises:
        WalkError: The first failing visit, chained to the visitor's exception
    """
    if token.cancelled:
        return

    _call(root, visit, token)

    if not root.is_container or not root.nodes:
        return

    _ConcurrentWalk(token.child(), visit, max_workers, logger).run(root.nodes)


class _ConcurrentWalk:
    """Task graph of a single concurrent walk, sharing one scope."""

    def __init__(self, scope: CancelToken, visit: ContextVisitor,
                 max_workers: Optional[int], logger: Optional[logging.Logger]):
        self.scope = scope
        self.visit = visit
        self.logger = logger or logging.getLogger('gitlab_cli.walker')
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or DEFAULT_WORKERS,
            thread_name_prefix="walker",
        )
        self._cond = threading.Condition()
        self._pending = 0
        self._error: Optional[BaseException] = None

    def run(self, nodes: Iterable[ProjectNode]) -> None:
        try:
            for node in nodes:
                self._submit(node)

            with self._cond:
                while self._pending:
                    self._cond.wait()
        except KeyboardInterrupt:
            self.scope.cancel()
            raise
        finally:
            self._executor.shutdown(wait=True)

        if self._error is not None:
            raise self._error

    def _submit(self, node: ProjectNode) -> None:
        if self.scope.cancelled:
            return
        with self._cond:
            self._pending += 1
        self._executor.submit(self._run, node)

    def _run(self, node: ProjectNode) -> None:
        try:
            if self.scope.cancelled:
                self.logger.debug(f"Walk cancelled, skipping {node.full_path}")
                return

            try:
                _call(node, self.visit, self.scope)
            except Exception as e:
                self._fail(e)
                return

            if node.is_container:
                for child in node.nodes:
                    self._submit(child)
        finally:
            with self._cond:
                self._pending -= 1
                if not self._pending:
                    self._cond.notify_all()

    def _fail(self, error: Exception) -> None:
        with self._cond:
            if self._error is None:
                self._error = error
            else:
                self.logger.debug(f"Discarding error after first failure: {error}")
        self.scope.cancel()

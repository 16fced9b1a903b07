#!/usr/bin/env python3
"""
Unit tests for project tree nodes and building trees from project lists.
"""

import unittest
from unittest.mock import Mock

from gitlab_cli.errors import InvariantViolation
from gitlab_cli.nodes import ContainerNode, Group, Project, ProjectRecord, User
from gitlab_cli.tree import add_sub_projects
from gitlab_cli.walker import walk


def record(path, archived=False):
    namespace, _, name = path.rpartition("/")
    return ProjectRecord(name=name, path_with_namespace=path, namespace=namespace, archived=archived)


def names(node):
    return [n.name for n in node.nodes]


class TestAddSubProjects(unittest.TestCase):
    """Test cases for add_sub_projects."""

    def test_simple_tree(self):
        """Test that groups between root and project are created."""
        root = Group(name="group", namespace="", full_path="group")

        add_sub_projects(root, [record("group/myproject"), record("group/build/bazel")])

        self.assertEqual(names(root), ["build", "myproject"])

        build = root.get_node("build")
        self.assertIsInstance(build, Group)
        self.assertEqual(build.namespace, "group")
        self.assertEqual(build.full_path, "group/build")
        self.assertEqual(names(build), ["bazel"])

        self.assertIsInstance(root.get_node("myproject"), Project)

    def test_deep_tree(self):
        """Test a tree with groups several levels deep."""
        root = Group(name="mygroup", namespace="test", full_path="test/mygroup")

        add_sub_projects(root, [
            record("test/mygroup/myproject"),
            record("test/mygroup/build/bazel"),
            record("test/mygroup/build/buck", archived=True),
            record("test/mygroup/build/shared/tools"),
        ])

        self.assertEqual(names(root), ["build", "myproject"])
        build = root.get_node("build")
        self.assertEqual(names(build), ["bazel", "buck", "shared"])
        shared = build.get_node("shared")
        self.assertEqual(shared.full_path, "test/mygroup/build/shared")
        self.assertEqual(names(shared), ["tools"])

    def test_order_independent(self):
        """Test that the order of the projects does not change the tree."""
        records = [
            record("g/z/one"),
            record("g/a"),
            record("g/z/y/two"),
            record("g/m"),
        ]
        first = Group(name="g", namespace="", full_path="g")
        second = Group(name="g", namespace="", full_path="g")

        add_sub_projects(first, records)
        add_sub_projects(second, list(reversed(records)))

        paths = []
        walk(first, lambda n: paths.append(n.full_path))
        other = []
        walk(second, lambda n: other.append(n.full_path))

        self.assertEqual(paths, other)
        self.assertEqual(paths, ["g", "g/a", "g/m", "g/z", "g/z/one", "g/z/y", "g/z/y/two"])

    def test_children_sorted(self):
        """Test that every container's nodes are sorted by name."""
        root = Group(name="g", namespace="", full_path="g")
        add_sub_projects(root, [record("g/c"), record("g/b/z"), record("g/b/a"), record("g/a")])

        def check(node):
            if isinstance(node, ContainerNode):
                self.assertEqual(names(node), sorted(names(node)))

        walk(root, check)

    def test_depth_and_containment(self):
        """Test that sub-nodes are one level deeper and inside their parent's path."""
        root = Group(name="mygroup", namespace="test", full_path="test/mygroup")
        add_sub_projects(root, [record("test/mygroup/build/shared/tools"), record("test/mygroup/x")])

        def check(node):
            if not isinstance(node, ContainerNode):
                return
            for child in node.nodes:
                self.assertEqual(child.depth, node.depth + 1)
                self.assertEqual(child.namespace, node.full_path)

        walk(root, check)

    def test_user_root(self):
        """Test building the tree of a user."""
        root = User("alice", "Alice Example")

        add_sub_projects(root, [record("alice/dotfiles"), record("alice/blog")])

        self.assertEqual(root.depth, 0)
        self.assertEqual(root.namespace, "")
        self.assertEqual(names(root), ["blog", "dotfiles"])
        self.assertEqual(root.get_node("blog").depth, 1)

    def test_mixed_case_paths(self):
        """Test that paths are matched regardless of case."""
        root = Group(name="MyGroup", namespace="test", full_path="Test/MyGroup")

        add_sub_projects(root, [record("test/mygroup/Sub/proj")])

        self.assertEqual(names(root), ["sub"])
        self.assertEqual(root.get_node("sub").full_path, "test/mygroup/sub")

    def test_project_where_group_expected(self):
        """Test that a project in place of a group is a broken invariant."""
        root = Group(name="group", namespace="", full_path="group")

        with self.assertRaises(InvariantViolation):
            add_sub_projects(root, [record("group/build"), record("group/build/bazel")])

    def test_duplicate_project(self):
        """Test that a project listed twice is a broken invariant."""
        root = Group(name="group", namespace="", full_path="group")

        with self.assertRaises(InvariantViolation):
            add_sub_projects(root, [record("group/a"), record("group/a")])

    def test_project_not_below_root(self):
        """Test that a project at the root's own path is a broken invariant."""
        root = Group(name="group", namespace="", full_path="group")

        with self.assertRaises(InvariantViolation):
            add_sub_projects(root, [record("group")])

    def test_no_projects(self):
        """Test that an empty list leaves the root empty."""
        root = Group(name="group", namespace="", full_path="group")

        add_sub_projects(root, [])

        self.assertEqual(root.nodes, ())


class TestNodes(unittest.TestCase):
    """Test cases for the node types."""

    def test_num_nodes(self):
        """Test counting nodes with and without archived projects."""
        root = Group(name="g", namespace="", full_path="g")
        add_sub_projects(root, [record("g/a"), record("g/b", archived=True), record("g/sub/c")])

        self.assertEqual(root.num_nodes(include_archived=True), 3)
        self.assertEqual(root.num_nodes(include_archived=False), 2)

    def test_nodes_is_read_only(self):
        """Test that nodes can't be modified through the nodes property."""
        root = Group(name="g", namespace="", full_path="g")
        root.add_nodes(Project(record("g/a")))

        self.assertIsInstance(root.nodes, tuple)

    def test_project_properties(self):
        """Test the attributes a project takes from its record."""
        project = Project(ProjectRecord(
            name="MyProject",
            path_with_namespace="Test/mygroup/myproject",
            namespace="test/MyGroup",
            archived=True,
            description="desc",
            http_url_to_repo="https://example.com/test/mygroup/myproject.git",
            ssh_url_to_repo="git@example.com:test/mygroup/myproject.git",
        ))

        self.assertEqual(project.name, "MyProject")
        self.assertEqual(project.namespace, "test/mygroup")
        self.assertEqual(project.full_path, "test/mygroup/myproject")
        self.assertEqual(project.depth, 2)
        self.assertTrue(project.archived)
        self.assertFalse(project.is_container)
        self.assertEqual(project.clone_urls, (
            "git@example.com:test/mygroup/myproject.git",
            "https://example.com/test/mygroup/myproject.git",
        ))

    def test_group_from_gitlab(self):
        """Test creating a group from a python-gitlab object."""
        group_mock = Mock(full_path="root/sub/MyCoolGroup")
        group_mock.name = "My Cool Group"

        group = Group.from_gitlab(group_mock)

        self.assertEqual(group.name, "My Cool Group")
        self.assertEqual(group.namespace, "root/sub")
        self.assertEqual(group.full_path, "root/sub/mycoolgroup")
        self.assertEqual(group.depth, 2)

    def test_record_from_gitlab(self):
        """Test creating a record from a python-gitlab project."""
        project = Mock()
        project.name = "tools"
        project.path_with_namespace = "test/mygroup/build/shared/tools"
        project.namespace = {"full_path": "test/mygroup/build/shared", "kind": "group"}
        project.archived = False
        project.description = None
        project.http_url_to_repo = "https://example.com/test/mygroup/build/shared/tools.git"
        project.ssh_url_to_repo = "git@example.com:test/mygroup/build/shared/tools.git"

        rec = ProjectRecord.from_gitlab(project)

        self.assertEqual(rec.name, "tools")
        self.assertEqual(rec.namespace, "test/mygroup/build/shared")
        self.assertEqual(rec.description, "")
        self.assertFalse(rec.archived)


if __name__ == '__main__':
    unittest.main(verbosity=2)

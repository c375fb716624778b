"""Tests for tree module."""

import itertools
import unittest

from todotree.task import Task
from todotree.tree import DuplicateTaskError, TaskTree, UnresolvedParentsError, build_forest


def shape(forest):
    """Reduce a forest to nested (id, children) tuples, order-independent."""
    return frozenset((tree.task.id, shape(tree.subtasks)) for tree in forest)


class TestBuildForest(unittest.TestCase):
    def test_tree_no_subtasks(self):
        """Test that tasks without parents all become childless roots."""
        tasks = [Task(1, "one"), Task(2, "two"), Task(3, "three")]

        forest = build_forest(tasks)

        self.assertEqual(len(forest), 3)
        self.assertEqual([tree.task.id for tree in forest], [1, 2, 3])
        for tree in forest:
            self.assertEqual(tree.subtasks, ())

    def test_tree_some_subtasks(self):
        """Test a single subtask attached below its parent."""
        tasks = [
            Task(1, "one"),
            Task(2, "two"),
            Task(3, "three"),
            Task(4, "four", parent_id=1),
        ]

        forest = build_forest(tasks)

        self.assertEqual(len(forest), 3)
        roots = [tree for tree in forest if tree.task.id == 1]
        self.assertEqual(len(roots), 1)
        self.assertEqual(len(roots[0].subtasks), 1)
        self.assertEqual(roots[0].subtasks[0].task.id, 4)
        for tree in forest:
            if tree.task.id != 1:
                self.assertEqual(len(tree.subtasks), 0)

    def test_tree_deep_chain_any_order(self):
        """Test that a chain 1 <- 2 <- 3 <- 4 is rebuilt for every input order."""
        chain = [
            Task(1, "one"),
            Task(2, "two", parent_id=1),
            Task(3, "three", parent_id=2),
            Task(4, "four", parent_id=3),
        ]

        for order in itertools.permutations(chain):
            with self.subTest(order=[task.id for task in order]):
                forest = build_forest(list(order))

                self.assertEqual(len(forest), 1)
                node = forest[0]
                for expected_id in (1, 2, 3, 4):
                    self.assertEqual(node.task.id, expected_id)
                    self.assertLessEqual(len(node.subtasks), 1)
                    if node.subtasks:
                        node = node.subtasks[0]
                self.assertEqual(node.subtasks, ())

    def test_tree_long_reversed_chain(self):
        """Test a long chain given leaf first builds without recursion limits."""
        count = 1200
        tasks = [Task(1, "root")]
        tasks += [Task(i, f"task {i}", parent_id=i - 1) for i in range(2, count + 1)]

        forest = build_forest(list(reversed(tasks)))

        self.assertEqual(len(forest), 1)
        self.assertEqual(forest[0].size, count)
        depths = [depth for depth, _ in forest[0].walk()]
        self.assertEqual(max(depths), count - 1)

    def test_tree_bad_input(self):
        """Test that a missing parent rejects the whole batch."""
        tasks = [Task(2, "two", parent_id=1), Task(3, "three", parent_id=2)]

        with self.assertRaises(UnresolvedParentsError) as ctx:
            build_forest(tasks)

        self.assertEqual(ctx.exception.count, 2)
        self.assertEqual(sorted(ctx.exception.task_ids), [2, 3])
        self.assertIn("missing parent nodes in 2 subtasks", str(ctx.exception))

    def test_tree_two_broken_chains_reported_together(self):
        """Test that every unresolved task of independent broken chains is reported."""
        tasks = [
            Task(1, "root"),
            Task(10, "orphan", parent_id=99),
            Task(11, "orphan child", parent_id=10),
            Task(2, "child", parent_id=1),
            Task(20, "cycle a", parent_id=21),
            Task(21, "cycle b", parent_id=20),
        ]

        with self.assertRaises(UnresolvedParentsError) as ctx:
            build_forest(tasks)

        self.assertEqual(sorted(ctx.exception.task_ids), [10, 11, 20, 21])

    def test_tree_self_parent_is_unresolved(self):
        """Test that a task naming itself as parent never resolves."""
        with self.assertRaises(UnresolvedParentsError) as ctx:
            build_forest([Task(1, "root"), Task(5, "loop", parent_id=5)])

        self.assertEqual(ctx.exception.task_ids, [5])

    def test_tree_duplicate_ids(self):
        """Test that repeated task ids are rejected."""
        with self.assertRaises(DuplicateTaskError):
            build_forest([Task(1, "one"), Task(1, "one again")])

    def test_tree_empty_input(self):
        """Test that no tasks give an empty forest."""
        self.assertEqual(build_forest([]), [])

    def test_tree_every_task_once(self):
        """Test that each task appears exactly once below a matching parent."""
        tasks = [
            Task(5, "e", parent_id=3),
            Task(3, "c", parent_id=1),
            Task(1, "a"),
            Task(4, "d", parent_id=1),
            Task(2, "b"),
            Task(6, "f", parent_id=2),
        ]

        forest = build_forest(tasks)

        ids = []
        for tree in forest:
            for _, node in tree.walk():
                ids.append(node.task.id)
                for subtask in node.subtasks:
                    self.assertEqual(subtask.task.parent_id, node.task.id)
        self.assertEqual(sorted(ids), [1, 2, 3, 4, 5, 6])
        self.assertEqual([tree.task.id for tree in forest], [1, 2])
        self.assertTrue(all(tree.task.parent_id is None for tree in forest))

    def test_tree_same_shape_on_rebuild(self):
        """Test that building twice from the same input gives the same nesting."""
        tasks = [
            Task(3, "c", parent_id=2),
            Task(2, "b", parent_id=1),
            Task(1, "a"),
            Task(4, "d", parent_id=1),
        ]

        self.assertEqual(shape(build_forest(tasks)), shape(build_forest(tasks)))


class TestTaskTree(unittest.TestCase):
    def setUp(self):
        self.tree = build_forest([
            Task(1, "a"),
            Task(2, "b", parent_id=1),
            Task(3, "c", parent_id=2),
            Task(4, "d", parent_id=1),
        ])[0]

    def test_walk_pre_order(self):
        """Test that walk yields parents before children with depths."""
        visited = [(depth, node.task.id) for depth, node in self.tree.walk()]
        self.assertEqual(visited, [(0, 1), (1, 2), (2, 3), (1, 4)])

    def test_find(self):
        """Test finding nested and absent tasks."""
        self.assertEqual(self.tree.find(3).task.content, "c")
        self.assertIsNone(self.tree.find(42))

    def test_tree_is_immutable(self):
        """Test that finished trees cannot be modified."""
        with self.assertRaises(AttributeError):
            self.tree.subtasks = ()
        self.assertIsInstance(self.tree.subtasks, tuple)
        self.assertIsInstance(self.tree, TaskTree)


if __name__ == '__main__':
    unittest.main()

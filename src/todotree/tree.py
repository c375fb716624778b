"""Reconstruction of the task hierarchy from flat parent references."""

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .task import Task


class UnresolvedParentsError(ValueError):
    """Raised when some tasks never reach a root through their parents.

    Covers both dangling parent references and parent cycles, which look the
    same to the builder.
    """

    def __init__(self, task_ids: Sequence[int]):
        self.task_ids = list(task_ids)
        super().__init__(
            f"missing parent nodes in {len(self.task_ids)} subtasks: "
            + ", ".join(str(task_id) for task_id in sorted(self.task_ids))
        )

    @property
    def count(self) -> int:
        return len(self.task_ids)


class DuplicateTaskError(ValueError):
    """Raised when the same task id occurs more than once in the input."""


@dataclass(frozen=True)
class TaskTree:
    """A task together with its subtasks, in the order they were attached."""

    task: Task
    subtasks: Tuple["TaskTree", ...] = ()

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "TaskTree"]]:
        """Yield (depth, node) pairs in pre-order."""
        stack = [(depth, self)]
        while stack:
            level, node = stack.pop()
            yield level, node
            stack.extend((level + 1, child) for child in reversed(node.subtasks))

    def find(self, task_id: int) -> Optional["TaskTree"]:
        """Get the node holding the given task id, if present in this tree."""
        for _, node in self.walk():
            if node.task.id == task_id:
                return node
        return None

    @property
    def size(self) -> int:
        """Number of tasks in this tree, including the root."""
        return sum(1 for _ in self.walk())


@dataclass
class _Slot:
    """Arena entry used while the forest is being built."""

    task: Task
    children: List[int]
    attached: bool = False


def build_forest(tasks: Iterable[Task]) -> List[TaskTree]:
    """
    Build the forest of task trees implied by the tasks' parent ids.

    Parents may appear after their children in the input. Subtasks whose
    parent is not yet known are requeued; once a full pass over the queue
    attaches nothing, the remaining subtasks cannot be resolved.

    Args:
        tasks: Task records with unique ids

    Returns:
        Root trees in input order. Subtasks are ordered by attachment.

    Raises:
        UnresolvedParentsError: If any parent id is missing or part of a cycle
        DuplicateTaskError: If a task id occurs more than once
    """
    arena: List[_Slot] = []
    index: Dict[int, int] = {}
    pending = deque()
    seen = set()

    for task in tasks:
        if task.id in seen:
            raise DuplicateTaskError(f"Task id {task.id} occurs more than once")
        seen.add(task.id)

        arena.append(_Slot(task, []))
        if task.parent_id is None:
            index[task.id] = len(arena) - 1
        else:
            pending.append(len(arena) - 1)

    misses = 0
    while pending and misses < len(pending):
        slot_id = pending.popleft()
        slot = arena[slot_id]
        parent_slot = index.get(slot.task.parent_id)
        if parent_slot is None:
            misses += 1
            pending.append(slot_id)
            continue

        misses = 0
        arena[parent_slot].children.append(slot_id)
        slot.attached = True
        index[slot.task.id] = slot_id

    if pending:
        raise UnresolvedParentsError([arena[slot_id].task.id for slot_id in pending])

    return [
        _finalize(arena, slot_id)
        for slot_id, slot in enumerate(arena)
        if not slot.attached
    ]


def _finalize(arena: List[_Slot], root_id: int) -> TaskTree:
    """Convert the arena entries below root_id into immutable trees."""
    built: Dict[int, TaskTree] = {}
    stack = [(root_id, False)]

    # Post-order so every child is built before its parent
    while stack:
        slot_id, expanded = stack.pop()
        slot = arena[slot_id]
        if expanded:
            built[slot_id] = TaskTree(
                task=slot.task,
                subtasks=tuple(built.pop(child) for child in slot.children),
            )
        else:
            stack.append((slot_id, True))
            stack.extend((child, False) for child in slot.children)

    return built[root_id]

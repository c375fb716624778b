"""Task records as returned by the Todoist REST API."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, List, Optional


class TaskFormatError(ValueError):
    """Raised when a task payload is missing or has malformed fields."""


class Priority(IntEnum):
    """Priority as given by the API: 1 for normal up to 4 for urgent."""

    NORMAL = 1
    HIGH = 2
    VERY_HIGH = 3
    URGENT = 4

    @property
    def label(self) -> str:
        """Get the menu label, e.g. '3 - Very High'."""
        return f"{self.value} - {self.name.replace('_', ' ').title()}"


@dataclass
class DueDate:
    """Due object of a task, mostly human-readable content."""

    human_readable: str
    date: str
    recurring: bool = False
    datetime: Optional[str] = None
    timezone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DueDate":
        return cls(
            human_readable=data.get("string", ""),
            date=data.get("date", ""),
            recurring=bool(data.get("recurring", False)),
            datetime=data.get("datetime"),
            timezone=data.get("timezone"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "string": self.human_readable,
            "date": self.date,
            "recurring": self.recurring,
        }
        if self.datetime is not None:
            data["datetime"] = self.datetime
            data["timezone"] = self.timezone
        return data


def _parse_id(data: Dict[str, Any], key: str, zero_is_none: bool = False) -> Optional[int]:
    """Read an id field, accepting both numbers and numeric strings."""
    value = data.get(key)
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise TaskFormatError(f"Task field '{key}' is not a valid id: {value!r}") from e
    # The API reports some unset references as 0
    if zero_is_none and number == 0:
        return None
    return number


def _parse_created(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError, AttributeError) as e:
        raise TaskFormatError(f"Task has invalid creation time: {value!r}") from e


@dataclass
class Task:
    """A single task. Only ``id`` and ``parent_id`` shape the task tree."""

    id: int
    content: str
    project_id: int = 0
    section_id: Optional[int] = None
    description: str = ""
    completed: bool = False
    label_ids: List[int] = field(default_factory=list)
    parent_id: Optional[int] = None
    order: int = 0
    priority: Priority = Priority.NORMAL
    due: Optional[DueDate] = None
    url: str = ""
    comment_count: int = 0
    assignee: Optional[int] = None
    assigner: Optional[int] = None
    created: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Create a Task from its API JSON representation.

        Args:
            data: Decoded JSON object of a single task

        Returns:
            The parsed Task

        Raises:
            TaskFormatError: If ``id`` or ``content`` is missing, or an id,
                priority or creation time is malformed
        """
        missing = [key for key in ("id", "content") if data.get(key) is None]
        if missing:
            raise TaskFormatError(f"Task is missing required fields: {', '.join(missing)}")

        due = data.get("due")
        try:
            priority = Priority(int(data.get("priority") or Priority.NORMAL))
        except (TypeError, ValueError):
            raise TaskFormatError(f"Task {data['id']} has invalid priority: {data.get('priority')!r}")

        return cls(
            id=_parse_id(data, "id"),
            content=data["content"],
            project_id=_parse_id(data, "project_id") or 0,
            section_id=_parse_id(data, "section_id", zero_is_none=True),
            description=data.get("description") or "",
            completed=bool(data.get("completed", False)),
            label_ids=list(data.get("label_ids") or []),
            parent_id=_parse_id(data, "parent_id"),
            order=int(data.get("order") or 0),
            priority=priority,
            due=DueDate.from_dict(due) if due else None,
            url=data.get("url") or "",
            comment_count=int(data.get("comment_count") or 0),
            assignee=_parse_id(data, "assignee"),
            assigner=_parse_id(data, "assigner", zero_is_none=True),
            created=_parse_created(data.get("created")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task back to its API JSON representation."""
        created = self.created
        if created is not None and created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "project_id": self.project_id,
            "section_id": self.section_id or 0,
            "content": self.content,
            "description": self.description,
            "completed": self.completed,
            "label_ids": list(self.label_ids),
            "parent_id": self.parent_id,
            "order": self.order,
            "priority": int(self.priority),
            "due": self.due.to_dict() if self.due else None,
            "url": self.url,
            "comment_count": self.comment_count,
            "assignee": self.assignee,
            "assigner": self.assigner or 0,
            "created": created.isoformat() if created else None,
        }

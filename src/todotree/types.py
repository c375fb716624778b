"""Custom Click parameter types for todotree argument validation."""

import click

from .task import Priority


class TaskIDType(click.ParamType):
    """Task id parameter type (positive integer)."""

    name = "task_id"

    def convert(self, value, param, ctx):
        if isinstance(value, int) and value > 0:
            return value
        try:
            task_id = int(value)
        except (TypeError, ValueError):
            self.fail(f"{value!r} is not a valid task id", param, ctx)
        if task_id <= 0:
            self.fail(f"{value!r} is not a valid task id", param, ctx)
        return task_id


class PriorityType(click.ParamType):
    """Priority parameter type, given as 1-4 or by name."""

    name = "priority"

    NAMES = {
        "normal": Priority.NORMAL,
        "high": Priority.HIGH,
        "very-high": Priority.VERY_HIGH,
        "very_high": Priority.VERY_HIGH,
        "urgent": Priority.URGENT,
    }

    def convert(self, value, param, ctx):
        if isinstance(value, Priority):
            return value

        text = str(value).strip().lower()
        if text in self.NAMES:
            return self.NAMES[text]
        try:
            return Priority(int(text))
        except ValueError:
            self.fail(
                f"{value} is not a valid priority (use 1-4 or one of: normal, high, very-high, urgent)",
                param,
                ctx
            )


TASK_ID = TaskIDType()
PRIORITY = PriorityType()

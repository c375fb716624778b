"""todotree - Todoist tasks rebuilt into their parent/child hierarchy."""

__version__ = "0.1.0"

from todotree.config import Config, ConfigError, load_config
from todotree.gateway import Gateway, GatewayError
from todotree.task import DueDate, Priority, Task, TaskFormatError
from todotree.tree import DuplicateTaskError, TaskTree, UnresolvedParentsError, build_forest

__all__ = [
    "__version__",
    "Config",
    "ConfigError",
    "load_config",
    "Gateway",
    "GatewayError",
    "DueDate",
    "Priority",
    "Task",
    "TaskFormatError",
    "DuplicateTaskError",
    "TaskTree",
    "UnresolvedParentsError",
    "build_forest",
]

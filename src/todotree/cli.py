"""Command-line interface for todotree."""

import logging
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table
from rich.tree import Tree

from .config import Config, ConfigError, load_config, write_sample_config
from .gateway import Gateway, GatewayError
from .task import Priority, Task
from .tree import DuplicateTaskError, TaskTree, UnresolvedParentsError, build_forest
from .types import PRIORITY, TASK_ID

app = typer.Typer(help="Hierarchical view of your Todoist tasks.")
console = Console()

logger = logging.getLogger(__name__)

TASK_OPTIONS = ["Close", "Edit", "Quit"]
EDIT_OPTIONS = ["Name", "Description", "Due", "Priority", "Quit"]

PRIORITY_STYLES = {
    Priority.NORMAL: "white",
    Priority.HIGH: "blue",
    Priority.VERY_HIGH: "yellow",
    Priority.URGENT: "bold red",
}


def get_config() -> Config:
    """Load the configuration, exiting on errors."""
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def get_gateway(config: Optional[Config] = None) -> Gateway:
    """Create a gateway from the configuration."""
    if config is None:
        config = get_config()
    try:
        token = config.require_token()
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    return Gateway(token, url=config.url, timeout=config.timeout)


def format_task(task: Task) -> str:
    """Format a task as a single line of rich markup."""
    style = PRIORITY_STYLES[task.priority]
    text = f"[bright_red]{task.id}[/bright_red] [{style}]{escape(task.content)}[/{style}]"
    if task.due:
        text += f" [dim]({escape(task.due.human_readable)})[/dim]"
    return text


def render_forest(forest: Sequence[TaskTree], title: str = "Tasks") -> Tree:
    """Build a rich Tree showing every task below its parent."""
    tree = Tree(f"[bold]{escape(title)}[/bold]")

    def add_subtasks(node, task_tree: TaskTree):
        branch = node.add(format_task(task_tree.task))
        for subtask in task_tree.subtasks:
            add_subtasks(branch, subtask)

    for task_tree in forest:
        add_subtasks(tree, task_tree)
    return tree


def render_table(forest: Sequence[TaskTree]) -> Table:
    """Build a flat table of all tasks, subtasks indented below parents."""
    table = Table(title="Tasks")
    table.add_column("ID", style="bright_red", no_wrap=True)
    table.add_column("Task", style="white")
    table.add_column("Due", style="cyan")
    table.add_column("Priority", style="yellow")

    for task_tree in forest:
        for depth, node in task_tree.walk():
            task = node.task
            table.add_row(
                str(task.id),
                "  " * depth + escape(task.content),
                escape(task.due.human_readable) if task.due else "",
                task.priority.label,
            )
    return table


def make_selection(items: Sequence[str], prompt: str, default: Optional[int] = None) -> Optional[int]:
    """
    Show a numbered menu and ask for a choice.

    Returns:
        Index of the chosen item, or None when the answer was empty
    """
    for number, item in enumerate(items, start=1):
        console.print(f"  [cyan]{number}[/cyan] {item}")

    answer = Prompt.ask(
        prompt,
        console=console,
        choices=[str(number) for number in range(1, len(items) + 1)],
        default="" if default is None else str(default + 1),
        show_choices=False,
        show_default=default is not None,
    )
    if not answer:
        return None
    return int(answer) - 1


def select_task(forest: Sequence[TaskTree]) -> Optional[TaskTree]:
    """Interactively pick one task of the forest."""
    nodes: List[TaskTree] = []
    labels = []
    for task_tree in forest:
        for depth, node in task_tree.walk():
            nodes.append(node)
            labels.append("  " * depth + format_task(node.task))

    index = make_selection(labels, "Select task")
    return None if index is None else nodes[index]


def select_task_option(task: Task, gateway: Gateway) -> None:
    """Ask what to do with the selected task and do it."""
    console.print(format_task(task))
    if task.description:
        console.print(f"[dim]{escape(task.description)}[/dim]")

    index = make_selection(TASK_OPTIONS, "Action")
    if index is None:
        console.print("No selection was made")
        return

    option = TASK_OPTIONS[index]
    if option == "Close":
        close_task(task.id, gateway)
    elif option == "Edit":
        edit_task_interactive(task, gateway)


def edit_task_interactive(task: Task, gateway: Gateway) -> None:
    """Ask which field to change, then ask for its new value."""
    index = make_selection(EDIT_OPTIONS, "Edit")
    if index is None:
        console.print("No selection was made")
        return

    option = EDIT_OPTIONS[index]
    if option == "Quit":
        return

    if option == "Priority":
        priorities = list(Priority)
        choice = make_selection(
            [priority.label for priority in priorities],
            "Set priority",
            default=priorities.index(task.priority),
        )
        if choice is None:
            console.print("No selection was made")
            return
        update_task(task.id, gateway, priority=priorities[choice])
        return

    text = Prompt.ask("New value", console=console, default="", show_default=False)
    if not text:
        console.print("No selection was made")
        return

    if option == "Name":
        update_task(task.id, gateway, content=text)
    elif option == "Description":
        update_task(task.id, gateway, description=text)
    elif option == "Due":
        update_task(task.id, gateway, due_string=text)


def close_task(task_id: int, gateway: Gateway) -> None:
    """Close a task and report it."""
    try:
        gateway.close(task_id)
    except GatewayError as e:
        console.print(f"[red]Unable to close task:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"closed task [bright_red]{task_id}[/bright_red]")


def update_task(task_id: int, gateway: Gateway, **fields) -> None:
    """Update a task and report it."""
    try:
        gateway.update(task_id, **fields)
    except GatewayError as e:
        console.print(f"[red]Unable to update task:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"updated task [bright_red]{task_id}[/bright_red]")


@app.command("list")
def list_tasks(
    filter: Optional[str] = typer.Option(
        None, "--filter", "-f", help="Filter query to run against the Todoist API."
    ),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Select a task to close or edit."
    ),
    flat: bool = typer.Option(False, "--flat", help="Show a table instead of a tree."),
):
    """List the tasks matching a filter."""
    config = get_config()
    gateway = get_gateway(config)
    if filter is None:
        filter = config.filter

    try:
        tasks = gateway.tasks(filter)
    except GatewayError as e:
        console.print(f"[red]Unable to fetch tasks:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        forest = build_forest(tasks)
    except (UnresolvedParentsError, DuplicateTaskError) as e:
        console.print(f"[red]tasks do not form clean tree:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    logger.debug("Built %d trees from %d tasks", len(forest), len(tasks))

    if not forest:
        console.print("[yellow]No tasks found[/yellow]")
        return

    if interactive:
        selected = select_task(forest)
        if selected is None:
            console.print("No selection was made")
            return
        select_task_option(selected.task, gateway)
        return

    if flat:
        console.print(render_table(forest))
    else:
        console.print(render_forest(forest, title=filter))


@app.command()
def close(task_id: int = typer.Argument(..., click_type=TASK_ID, help="Task id, see `list`.")):
    """Close a task."""
    close_task(task_id, get_gateway())


@app.command()
def edit(
    task_id: int = typer.Argument(..., click_type=TASK_ID, help="Task id, see `list`."),
    name: Optional[str] = typer.Option(None, "--name", help="New task name."),
    desc: Optional[str] = typer.Option(None, "--desc", help="New description."),
    due: Optional[str] = typer.Option(None, "--due", help="New due date in natural language."),
    priority: Optional[int] = typer.Option(
        None, "--priority", "-p", click_type=PRIORITY, help="1-4 or normal/high/very-high/urgent."
    ),
):
    """Edit fields of a task."""
    if name is None and desc is None and due is None and priority is None:
        raise typer.BadParameter("Give at least one of --name, --desc, --due, --priority")

    update_task(
        task_id,
        get_gateway(),
        content=name,
        description=desc,
        due_string=due,
        priority=priority,
    )


@app.command()
def init():
    """Create a sample config file."""
    try:
        path = write_sample_config()
    except FileExistsError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    console.print(f"[green]Created sample config at {path}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """todotree - Todoist tasks as a tree."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()

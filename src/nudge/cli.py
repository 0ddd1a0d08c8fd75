"""nudge CLI - tiny-step task manager."""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from .adapters import ChimeNotifier, IcalMeetingFeed, JsonTaskStorage, SilentNotifier
from .config import load_calendar_url, load_config, save_calendar_url
from .controller import InteractionController
from .core import lifecycle
from .core.lifecycle import AdvanceResult, Outcome
from .core.tasks import TaskStatus, TaskStore

RULE = click.style("━" * 50, fg="bright_black")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _open_store() -> tuple[JsonTaskStorage, TaskStore]:
    config = load_config()
    storage = JsonTaskStorage(config.data_path)
    return storage, storage.load()


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def _ok(mark: str = "✓", color: str = "green") -> str:
    return click.style(mark, fg=color)


def _dim(text: str) -> str:
    return click.style(text, dim=True)


@click.group()
@click.version_option(package_name="nudge")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """nudge - break tasks into tiny steps and do the next one."""
    # The board logs to a file instead so the screen stays intact
    if debug and ctx.invoked_subcommand != "board":
        logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG)


@main.command()
@click.argument("description", nargs=-1)
def add(description: tuple[str, ...]):
    """Add a new task."""
    desc = " ".join(description).strip()
    if not desc:
        _fail("Error: Task description cannot be empty")

    storage, store = _open_store()
    task_id = lifecycle.add(store, desc)
    storage.save(store)
    click.echo(f"{_ok()} Task #{task_id} added: {desc}")


@main.command()
def start():
    """Show the one thing to do next."""
    storage, store = _open_store()
    task = lifecycle.next_action(store)
    if task is None:
        click.secho("🎉 Nothing to do! Add a task with: nudge add <description>", fg="bright_green")
        return

    # Picking a NotStarted task moves it to InProgress
    storage.save(store)

    click.echo(f"\n{RULE}")
    click.secho("NEXT ACTION:", fg="bright_cyan", bold=True)
    click.echo(RULE)

    arrow = click.style("→", fg="bright_yellow")
    if not task.steps:
        click.echo(f"\n{arrow} {task.description}")
        click.echo(_dim("\nThis task hasn't been broken down yet."))
        click.echo(_dim(f"Try: nudge break {task.id}"))
    else:
        click.echo(f"\n{arrow} {click.style(task.current_step_text, bold=True)}")
        click.echo(f"\n{_dim('Task:')} {_dim(task.description)}")
        click.echo(f"{_dim('Step:')} {task.current_step + 1}/{len(task.steps)}")
        click.secho(f"\nWhen done: nudge done {task.id}", fg="bright_green")
    click.echo(f"{RULE}\n")


@main.command()
@click.option("--debug", is_flag=True, help="Write debug logs to the log file")
def board(debug: bool):
    """Open the interactive kanban board."""
    from .tui import run_board

    config = load_config()
    _setup_file_logging(config.log_path, debug)

    storage = JsonTaskStorage(config.data_path)
    store = storage.load()
    meeting = IcalMeetingFeed(load_calendar_url(), timeout=config.calendar_timeout).next_meeting()
    notifier = ChimeNotifier(player=config.chime_player) if config.chime else SilentNotifier()

    controller = InteractionController(store, storage, notifier, meeting=meeting)
    try:
        run_board(controller, refresh_interval=config.refresh_interval)
    except OSError as e:
        _fail(f"Error running board: {e}")


def _setup_file_logging(path: Path, debug: bool) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        click.echo(f"Warning: cannot create log directory: {e}", err=True)
        return
    logging.basicConfig(
        filename=path,
        format=LOG_FORMAT,
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command("break")
@click.argument("task_id", type=int)
def break_down(task_id: int):
    """Break a task into tiny steps."""
    storage, store = _open_store()
    task = store.get(task_id)
    if task is None:
        _fail(f"Error: Task #{task_id} not found")

    click.secho("\nBreaking down task:", fg="bright_cyan")
    click.secho(f"{task.description}\n", bold=True)
    click.echo(_dim("Let's break this into tiny, concrete steps."))
    click.echo(_dim("Each step should be something you can do in 2-5 minutes.\n"))

    steps: list[str] = []
    while True:
        prompt = "What's the absolute smallest first action?" if not steps else "Next step? (press Enter to finish)"
        step = click.prompt(prompt, default="", show_default=False).strip()
        if not step:
            if not steps:
                click.secho("Need at least one step!", fg="yellow")
                continue
            break
        steps.append(step)

    lifecycle.set_steps(store, task_id, steps)
    storage.save(store)

    click.echo(f"\n{_ok()} Broken into {len(steps)} steps!")
    click.secho("Start with: nudge start", fg="bright_green")


@main.command()
@click.argument("task_id", type=int)
def done(task_id: int):
    """Complete the current step (or the whole task)."""
    storage, store = _open_store()
    result = lifecycle.advance(store, task_id)

    match result:
        case AdvanceResult.NOT_FOUND:
            _fail(f"Error: Task #{task_id} not found")
        case AdvanceResult.TASK_COMPLETED:
            storage.save(store)
            click.echo(f"{_ok()} Task #{task_id} completed! 🎉")
        case AdvanceResult.STEP_ADVANCED:
            storage.save(store)
            task = store.get(task_id)
            click.echo(f"{_ok()} Step {task.current_step} done! Moving to next step.")
            click.secho("Continue with: nudge start", fg="bright_cyan")


@main.command()
@click.argument("task_id", type=int)
def block(task_id: int):
    """Mark a task as blocked."""
    storage, store = _open_store()
    if lifecycle.block(store, task_id) != Outcome.OK:
        _fail(f"Error: Task #{task_id} not found or already complete")

    storage.save(store)
    click.echo(f"{_ok('⊘', 'yellow')} Task #{task_id} marked as blocked")
    click.echo(_dim("Task will be skipped by 'nudge start'"))
    click.echo(_dim(f"To unblock: nudge unblock {task_id}"))


@main.command()
@click.argument("task_id", type=int)
def unblock(task_id: int):
    """Unblock a blocked task."""
    storage, store = _open_store()
    if lifecycle.unblock(store, task_id) != Outcome.OK:
        _fail(f"Error: Task #{task_id} not found or not blocked")

    storage.save(store)
    click.echo(f"{_ok()} Task #{task_id} unblocked")


@main.command()
@click.argument("task_id", type=int)
def reset(task_id: int):
    """Move a task back to Not Started."""
    storage, store = _open_store()
    if lifecycle.reset(store, task_id) != Outcome.OK:
        _fail(f"Error: Task #{task_id} not found or already complete")

    storage.save(store)
    click.echo(f"{_ok('↺', 'bright_cyan')} Task #{task_id} reset to Not Started")


STATUS_STYLES = {
    TaskStatus.NOT_STARTED: ("Not Started", {"fg": "bright_black"}),
    TaskStatus.IN_PROGRESS: ("In Progress", {"fg": "bright_cyan"}),
    TaskStatus.BLOCKED: ("BLOCKED", {"fg": "yellow", "bold": True}),
    TaskStatus.COMPLETE: ("Complete", {"fg": "green"}),
}


@main.command("list")
def list_tasks():
    """List all tasks that aren't complete."""
    _, store = _open_store()
    incomplete = [t for t in store.tasks if t.status != TaskStatus.COMPLETE]

    if not incomplete:
        click.echo(_dim("No active tasks. Add one with: nudge add <description>"))
        return

    click.secho("\nACTIVE TASKS:", fg="bright_cyan", bold=True)
    click.echo(RULE)

    for task in incomplete:
        label, style = STATUS_STYLES[task.status]
        task_id = click.style(str(task.id), fg="bright_white", bold=True)
        click.echo(f"\n#{task_id} {task.description} [{click.style(label, **style)}] {_dim(task.progress_label())}")

        for i, step in enumerate(task.steps):
            if i < task.current_step:
                marker = click.style("✓", fg="green")
            elif i == task.current_step:
                marker = click.style("→", fg="bright_yellow")
            else:
                marker = _dim("·")
            click.echo(f"  {marker} {_dim(step)}")
    click.echo()


@main.command()
@click.argument("task_id", type=int)
def remove(task_id: int):
    """Delete a task."""
    storage, store = _open_store()
    if not lifecycle.remove(store, task_id):
        _fail(f"Error: Task #{task_id} not found")

    storage.save(store)
    click.echo(f"{_ok()} Task #{task_id} removed")


@main.command("auth-calendar")
def auth_calendar():
    """Set up the calendar feed (secret iCal address)."""
    click.secho("Setting up Calendar integration (iCal URL)...", fg="bright_cyan")
    click.echo()
    click.echo(_dim("To get your iCal URL:"))
    click.echo(_dim("  Google Calendar: Settings → Your calendar → Secret address in iCal format"))
    click.echo(_dim("  Outlook: Calendar → Share → Publish → Get ICS link"))
    click.echo(_dim("  Other: Look for 'iCal', 'webcal', or 'ICS' URL in calendar settings"))
    click.echo()

    url = click.prompt("Enter your iCal URL")
    try:
        save_calendar_url(url)
    except (ValueError, OSError) as e:
        _fail(f"Error: {e}")

    click.secho("✓ Calendar URL saved!", fg="green")
    click.echo(_dim("You can now see your next meeting in the board view."))


if __name__ == "__main__":
    main()

import click
import logging
from typing import Any, Callable, List, Optional, Sequence

from core.errors import LibraryError
from core.models.library import Book

logger = logging.getLogger(__name__)

BOX_WIDTH = 45


def print_box(title: str, lines: Optional[Sequence[str]] = None) -> None:
    """Print a boxed menu header, optionally followed by boxed menu lines"""
    border = "+" + "-" * (BOX_WIDTH - 2) + "+"
    click.echo(click.style(border, fg='blue'))
    click.echo(click.style("|" + title.center(BOX_WIDTH - 2) + "|", fg='blue', bold=True))
    click.echo(click.style(border, fg='blue'))
    if lines:
        for line in lines:
            click.echo(click.style("| ", fg='blue') + line.ljust(BOX_WIDTH - 4) + click.style(" |", fg='blue'))
        click.echo(click.style(border, fg='blue'))


def print_menu(title: str, options: Sequence[str]) -> None:
    width = len(str(len(options)))
    print_box(title, [f"({str(i).rjust(width)}) {option}" for i, option in enumerate(options, start=1)])


def echo_success(message: str) -> None:
    click.echo(click.style(message, fg='green'))


def echo_info(message: str) -> None:
    click.echo(click.style(message, fg='cyan'))


def echo_warning(message: str) -> None:
    click.echo(click.style(message, fg='yellow'))


def echo_error(message: str) -> None:
    click.echo(click.style(message, fg='red'))


def prompt_text(label: str, hide_input: bool = False) -> str:
    """Prompt for a line of text; an empty answer is returned as ''"""
    return click.prompt(label, default="", show_default=False, hide_input=hide_input)


def prompt_choice(maximum: int, label: str = "Select") -> int:
    """Prompt until the user enters a number from 1 to ``maximum``"""
    while True:
        raw = click.prompt(f"{label}(1-{maximum})", default="", show_default=False)
        try:
            choice = int(raw.strip())
        except ValueError:
            echo_error("Error: Invalid input. Please enter a valid number.")
            continue
        if 1 <= choice <= maximum:
            return choice
        echo_error(f"Invalid choice. Please select a number between 1 and {maximum}.")


def prompt_index(count: int, label: str) -> Optional[int]:
    """Prompt for a 1-based position in a list; returns a 0-based index or None to cancel"""
    raw = click.prompt(label, default="", show_default=False)
    try:
        choice = int(raw.strip())
    except ValueError:
        return None
    if 1 <= choice <= count:
        return choice - 1
    return None


def print_table(headers: Sequence[str], rows: List[Sequence[Any]], widths: Sequence[int]) -> None:
    def fmt(values: Sequence[Any]) -> str:
        return "| " + " | ".join(str(v)[:w].ljust(w) for v, w in zip(values, widths)) + " |"

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    click.echo(border)
    click.echo(click.style(fmt(headers), bold=True))
    click.echo(border)
    for row in rows:
        click.echo(fmt(row))
    click.echo(border)


def print_books(books: List[Book]) -> None:
    if not books:
        echo_warning("The catalog is empty.")
        return
    print_table(
        ["Title", "Author", "ISBN", "Avail"],
        [[b.title, b.author, b.isbn, "true" if b.available else "false"] for b in books],
        [22, 16, 14, 5],
    )


def run_action(action: Callable[..., Any], *args, **kwargs) -> Any:
    """Run one menu action, reporting failures instead of leaving the menu loop.

    Returns the action's result, or None if it failed.
    """
    try:
        return action(*args, **kwargs)
    except LibraryError as e:
        echo_error(str(e))
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Unexpected error in %s", getattr(action, "__name__", action))
        echo_error(f"Error: {e}")
    return None

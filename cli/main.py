# cli/main.py
import click
import logging
import sys

from core.config import BACKENDS, Settings
from core.errors import StorageError
from core.library import Library
from core.session import SessionMachine
from .menus import LibrarianDashboard, LoginMenu, ReaderDashboard
from .utils import print_box


def setup_logging(verbose: bool) -> None:
    """Log to stderr so the menus on stdout stay readable"""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root.addHandler(handler)
    root.setLevel(logging.INFO if verbose else logging.WARNING)


@click.command()
@click.option('--data-dir', default=None, type=click.Path(file_okay=False),
              help='Directory holding books.csv, user.csv, librarian.csv and library-data/')
@click.option('--backend', default=None, type=click.Choice(BACKENDS, case_sensitive=False),
              help='Storage backend (default: csv flat files)')
@click.option('--database-url', default=None, help='SQLAlchemy URL for the sqlite backend')
@click.option('--loan-days', default=None, type=click.IntRange(min=1), help='Loan period in days')
@click.option('--strict/--lenient', default=None, help='Fail on malformed CSV rows instead of skipping them')
@click.option('--verbose/--no-verbose', default=False, help='Show detailed progress')
def cli(data_dir, backend, database_url, loan_days, strict, verbose):
    """Library management console"""
    setup_logging(verbose)

    try:
        settings = Settings.from_env(
            data_dir=data_dir,
            backend=backend.lower() if backend else None,
            database_url=database_url,
            loan_days=loan_days,
            strict_csv=strict,
        )
        library = Library(settings)
    except (ValueError, StorageError) as e:
        raise click.ClickException(str(e))

    try:
        SessionMachine().run(
            LoginMenu(library),
            ReaderDashboard(library),
            LibrarianDashboard(library),
        )
    finally:
        library.close()

    print_box("THANK YOU FOR USING THE LIBRARY", ["Goodbye!"])


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()

import click
from typing import List, Optional

from core.library import Library
from core.models.library import Book, BorrowRecord, ReaderAccount
from core.session import DashboardExit
from .account import manage_account
from ..utils import (
    echo_error, echo_info, echo_success, echo_warning, print_books, print_box, print_menu,
    print_table, prompt_choice, prompt_index, prompt_text, run_action
)

READER_MENU = [
    "View Library",
    "Publish a Book",
    "Borrow a Book",
    "Return a Book",
    "Rate a Book",
    "View Borrowed Books",
    "View Reading History",
    "Add to Favorites",
    "Leave a Review",
    "Manage your Account",
    "Log Out",
]

LIBRARY_MENU = [
    "Display all books",
    "Search books",
    "Read a book",
    "Reader of the Week",
    "Back to Reader Menu",
]


class ReaderDashboard:
    """Menu loop for a logged-in reader"""

    def __init__(self, library: Library):
        self.library = library
        self.username = ""

    def __call__(self, account: ReaderAccount) -> DashboardExit:
        self.username = account.username
        print_box(f"WELCOME {self.username}!")

        actions = {
            1: self.view_library,
            2: self.publish_book,
            3: self.borrow_book,
            4: self.return_book,
            5: self.rate_book,
            6: self.view_borrowed_books,
            7: self.view_reading_history,
            8: self.add_to_favorites,
            9: self.leave_review,
        }
        while True:
            print_menu("LIBRARY MANAGEMENT SYSTEM", READER_MENU)
            choice = prompt_choice(len(READER_MENU))
            if choice in actions:
                run_action(actions[choice])
            elif choice == 10:
                change = manage_account(self.library.readers, self.username)
                self.username = change.username
                if change.deleted:
                    click.echo("Returning to main menu after account deletion...")
                    return DashboardExit.ACCOUNT_DELETED
            else:
                click.echo("Logging out...")
                return DashboardExit.LOGGED_OUT

    # View Library

    def view_library(self) -> None:
        while True:
            print_menu("LIBRARY MAIN DASHBOARD", LIBRARY_MENU)
            choice = prompt_choice(len(LIBRARY_MENU))
            if choice == 1:
                print_books(self.library.catalog.list_books())
            elif choice == 2:
                query = prompt_text("Search title, author or ISBN")
                results = self.library.catalog.search(query)
                if results:
                    print_books(results)
                else:
                    echo_warning(f"No books found for '{query}'")
            elif choice == 3:
                run_action(self.read_book)
            elif choice == 4:
                self.reader_of_the_week()
            else:
                return

    def _select_book(self, books: List[Book]) -> Optional[Book]:
        if len(books) == 1:
            return books[0]
        for index, book in enumerate(books, start=1):
            click.echo(f"{index}. {book.title} by {book.author} (ISBN: {book.isbn}, Available: {book.available})")
        index = prompt_index(len(books), "Enter the number of the book (or 0 to cancel)")
        if index is None:
            echo_warning("Invalid selection or cancelled.")
            return None
        return books[index]

    def read_book(self) -> None:
        query = prompt_text("Enter book title, author or ISBN to read")
        results = self.library.catalog.search(query)
        if not results:
            echo_warning(f"No books found for '{query}'")
            return
        book = self._select_book(results)
        if book is None:
            return
        account = self.library.catalog.read_book(book.isbn, self.username)
        print_box("READING...")
        echo_success(f"Congratulations! You have just finished reading '{book.title}'")
        echo_info(f"Books read so far: {account.books_read}")

    def reader_of_the_week(self) -> None:
        print_box("READER OF THE WEEK")
        reader = self.library.reports.reader_of_the_week()
        if reader is None:
            echo_warning("No reader of the week found.")
        else:
            echo_success(f"CONGRATULATIONS TO {reader.username} who read {reader.books_read} books!")

    # Lending

    def publish_book(self) -> None:
        print_box("PUBLISH CONTROL PANEL", ["Publish a Book"])
        title = prompt_text("Enter a book name")
        author = prompt_text("Enter the author")
        isbn = prompt_text("Enter isbn number")
        submission = self.library.catalog.submit(self.username, title, author, isbn)
        echo_success(f'Your book "{submission.title}" has been added to the book approval list of librarians.')

    def borrow_book(self) -> None:
        print_books(self.library.catalog.list_books())
        isbn = prompt_text("Enter the ISBN of the book you want to borrow")
        receipt = self.library.catalog.borrow(isbn, self.username)
        echo_success(f'You have borrowed "{receipt.book.title}".')
        echo_info(f"Please return it by {receipt.due_at:%Y-%m-%d}.")

    def _print_borrowed(self, records: List[BorrowRecord], numbered: bool = False) -> None:
        if numbered:
            for index, record in enumerate(records, start=1):
                click.echo(f"{index}. {record.title} by {record.author} (ISBN: {record.isbn})")
            return
        print_table(
            ["Title", "Author", "ISBN"],
            [[r.title, r.author, r.isbn] for r in records],
            [22, 16, 20],
        )

    def _borrowed_or_warn(self) -> List[BorrowRecord]:
        records = self.library.ledger.borrowed_books_of(self.username)
        if not records:
            echo_warning("You haven't borrowed any book yet.")
        return records

    def return_book(self) -> None:
        print_box("RETURN A BOOK")
        records = self._borrowed_or_warn()
        if not records:
            return
        click.echo("Your borrowed books:")
        self._print_borrowed(records, numbered=True)
        index = prompt_index(len(records), "Enter the number of the book to return")
        if index is None:
            echo_error("Invalid selection.")
            return
        record = self.library.catalog.return_book(records[index].isbn, self.username)
        echo_success(f'You have returned "{record.title}".')

    def rate_book(self) -> None:
        print_box("RATE A BOOK")
        records = self._borrowed_or_warn()
        if not records:
            return
        self._print_borrowed(records)
        isbn = prompt_text("Enter the ISBN of the book you want to rate")
        if self.library.ledger.holding(self.username, isbn) is None:
            echo_error(f"You haven't borrowed a book with ISBN {isbn}.")
            return
        rating = prompt_text("Enter your rating (1-5)")
        entry = self.library.ledger.add_rating(self.username, isbn, rating)
        echo_success(f"Thank you for rating book {entry.isbn} with {entry.rating} stars!")

    def view_borrowed_books(self) -> None:
        print_box("YOUR BORROWED BOOKS")
        records = self.library.ledger.borrowed_books_of(self.username)
        if not records:
            echo_warning("You have no borrowed books.")
            return
        rows = []
        for record in records:
            due_at = self.library.ledger.due_date(record)
            rows.append([record.title, record.author, record.isbn, f"{due_at:%Y-%m-%d}" if due_at else "-"])
        print_table(["Title", "Author", "ISBN", "Due"], rows, [22, 16, 14, 10])

    def view_reading_history(self) -> None:
        print_box("YOUR READING HISTORY")
        history = self.library.ledger.history_of(self.username)
        if not history:
            echo_warning("No reading history yet.")
        for entry in history:
            click.echo(f"{entry.title} by {entry.author} (ISBN: {entry.isbn})")

        favorites = self.library.ledger.favorites_of(self.username)
        if favorites:
            click.echo("\n" + click.style("Favorites:", fg='blue'))
            for favorite in favorites:
                click.echo(f"{favorite.title} by {favorite.author} (ISBN: {favorite.isbn})")

    def add_to_favorites(self) -> None:
        print_box("ADD TO FAVORITES")
        records = self._borrowed_or_warn()
        if not records:
            return
        self._print_borrowed(records)
        isbn = prompt_text("Enter the ISBN of the book to add to favorites")
        favorite = self.library.ledger.add_favorite(self.username, isbn)
        echo_success(f'"{favorite.title}" added to favorites.')

    def leave_review(self) -> None:
        print_box("LEAVE A REVIEW")
        records = self._borrowed_or_warn()
        if not records:
            return
        self._print_borrowed(records)
        isbn = prompt_text("Enter the ISBN of the book to review")
        if self.library.ledger.holding(self.username, isbn) is None:
            echo_error(f"You haven't borrowed a book with ISBN {isbn}.")
            return
        text = prompt_text("Enter your review")
        entry = self.library.ledger.add_review(self.username, isbn, text)
        echo_success(f"Thank you for creating a review for book {entry.isbn}!")

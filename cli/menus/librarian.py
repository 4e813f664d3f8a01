import click
from datetime import datetime, UTC

from core.library import Library
from core.models.library import LibrarianAccount
from core.session import DashboardExit
from .account import manage_account
from ..utils import (
    echo_info, echo_success, echo_warning, print_books, print_box, print_menu, print_table,
    prompt_choice, prompt_text, run_action
)

LIBRARIAN_MENU = [
    "Add",
    "Remove",
    "Update Info",
    "View All Books",
    "View Borrowed Books",
    "View Overdue Books",
    "Manage your Account",
    "View Ratings and Reviews",
    "Generate Report",
    "Review Submissions",
    "Log Out",
]


class LibrarianDashboard:
    """Menu loop for a logged-in librarian"""

    def __init__(self, library: Library):
        self.library = library
        self.username = ""

    def __call__(self, account: LibrarianAccount) -> DashboardExit:
        self.username = account.username
        print_box(f"WELCOME {self.username}!")

        actions = {
            1: self.add_book,
            2: self.remove_book,
            3: self.update_book,
            4: self.view_all_books,
            5: self.view_borrowed_books,
            6: self.view_overdue_books,
            8: self.view_ratings_and_reviews,
            9: self.generate_report,
            10: self.review_submissions,
        }
        while True:
            print_menu("LIBRARIAN CONTROL PANEL", LIBRARIAN_MENU)
            choice = prompt_choice(len(LIBRARIAN_MENU))
            if choice in actions:
                run_action(actions[choice])
            elif choice == 7:
                change = manage_account(self.library.librarians, self.username)
                self.username = change.username
                if change.deleted:
                    click.echo("Returning to main menu after account deletion...")
                    return DashboardExit.ACCOUNT_DELETED
            else:
                click.echo("Logging out...")
                return DashboardExit.LOGGED_OUT

    # Curation

    def add_book(self) -> None:
        print_box("ADD A BOOK")
        title = prompt_text("Enter book title")
        author = prompt_text("Enter book author")
        isbn = prompt_text("Enter book ISBN")
        book = self.library.catalog.add(title, author, isbn)
        echo_success(f'Book "{book.title}" added with ISBN {book.isbn}.')

    def remove_book(self) -> None:
        print_box("REMOVE A BOOK")
        isbn = prompt_text("Enter ISBN of the book to remove")
        if self.library.catalog.remove_by_isbn(isbn):
            echo_success("Book removed successfully.")
        else:
            echo_warning(f"No book found with ISBN {isbn}.")

    def update_book(self) -> None:
        print_box("UPDATE BOOK INFO")
        isbn = prompt_text("Enter ISBN of the book to update")
        book = self.library.catalog.find_by_isbn(isbn, refresh=True)
        if book is None:
            echo_warning(f"No book found with ISBN {isbn}.")
            return
        new_title = prompt_text(f"Enter new title (leave blank to keep '{book.title}')")
        new_author = prompt_text(f"Enter new author (leave blank to keep '{book.author}')")
        updated = self.library.catalog.update_info(book.isbn, new_title, new_author)
        echo_success(f'Book updated: "{updated.title}" by {updated.author}.')

    # Views

    def view_all_books(self) -> None:
        print_box("ALL BOOKS")
        print_books(self.library.catalog.list_books())

    def view_borrowed_books(self) -> None:
        print_box("BORROWED BOOKS")
        loans = self.library.ledger.active_loans()
        if not loans:
            echo_warning("No books are currently borrowed.")
            return
        rows = []
        for record in loans:
            due_at = self.library.ledger.due_date(record)
            rows.append([
                record.title, record.username, record.isbn,
                f"{due_at:%Y-%m-%d}" if due_at else "-",
            ])
        print_table(["Title", "Borrowed By", "ISBN", "Due"], rows, [22, 14, 14, 10])

    def view_overdue_books(self) -> None:
        print_box("OVERDUE BOOKS")
        now = datetime.now(UTC)
        overdue = self.library.reports.overdue(now)
        if not overdue:
            echo_success("No overdue books.")
            return
        print_table(
            ["Title", "Borrowed By", "Due", "Days Late"],
            [
                [o.record.title, o.record.username, f"{o.due_at:%Y-%m-%d}", (now - o.due_at).days]
                for o in overdue
            ],
            [22, 14, 10, 9],
        )

    def view_ratings_and_reviews(self) -> None:
        print_box("RATINGS AND REVIEWS")
        ratings = self.library.ledger.ratings()
        reviews = self.library.ledger.reviews()
        if not ratings and not reviews:
            echo_warning("No ratings or reviews yet.")
            return

        if ratings:
            click.echo(click.style("Ratings:", fg='blue'))
            print_table(
                ["User", "ISBN", "Rating"],
                [[r.username, r.isbn, "*" * r.rating] for r in ratings],
                [16, 20, 6],
            )
        if reviews:
            click.echo(click.style("Reviews:", fg='blue'))
            for review in reviews:
                click.echo(f"{review.username} on {review.isbn}: {review.text}")

    def generate_report(self) -> None:
        report = self.library.reports.report()
        lines = [
            f"Total books: {report.total_books}",
            f"Available books: {report.available_books}",
            f"Borrowed books: {report.borrowed_books}",
            f"Overdue books: {report.overdue_books}",
            f"Registered readers: {report.total_readers}",
            f"Ratings: {report.total_ratings}",
            f"Reviews: {report.total_reviews}",
        ]
        if report.most_active_reader is not None:
            reader = report.most_active_reader
            lines.append(f"Most active: {reader.username} ({reader.books_read})")
        if report.most_borrowed_isbn is not None:
            title = report.most_borrowed_title or report.most_borrowed_isbn
            lines.append(f"Most borrowed: {title[:20]} ({report.most_borrowed_count}x)")
        print_box("LIBRARY REPORT", lines)

    # Submissions

    def review_submissions(self) -> None:
        print_box("BOOK SUBMISSIONS")
        submissions = self.library.catalog.list_submissions()
        if not submissions:
            echo_info("No submissions waiting for approval.")
            return

        print_table(
            ["Title", "Author", "ISBN", "Submitted By"],
            [[s.title, s.author, s.isbn, s.username] for s in submissions],
            [22, 16, 14, 12],
        )
        isbn = prompt_text("Enter the ISBN of the submission to review (blank to go back)")
        if not isbn.strip():
            return

        print_menu("SUBMISSION", ["Approve", "Reject", "Back"])
        choice = prompt_choice(3)
        if choice == 1:
            book = self.library.catalog.approve_submission(isbn)
            echo_success(f'"{book.title}" has been added to the catalog.')
        elif choice == 2:
            submission = self.library.catalog.reject_submission(isbn)
            echo_success(f'Submission "{submission.title}" rejected.')

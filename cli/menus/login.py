import click

from core.library import Library
from core.session import ExitApp, LibrarianLoggedIn, LoginResult, ReaderLoggedIn, StayOnLogin
from ..utils import echo_error, echo_success, print_box, print_menu, prompt_choice, prompt_text, run_action

READER = 1
LIBRARIAN = 2


class LoginMenu:
    """First screen: log in, sign up or exit"""

    def __init__(self, library: Library):
        self.library = library

    def __call__(self) -> LoginResult:
        print_menu("LIBRARY MANAGEMENT SYSTEM", ["Log In", "Sign Up", "Exit"])
        choice = prompt_choice(3)
        if choice == 3:
            return ExitApp

        user_type = self.choose_user_type()
        if user_type not in (READER, LIBRARIAN):
            echo_error("You must specify what type of user you are")
            return StayOnLogin
        if choice == 1:
            return self.log_in(user_type)
        return self.sign_up(user_type)

    def choose_user_type(self) -> int:
        print_menu("TYPE OF USER", ["Reader", "Librarian", "Back"])
        return prompt_choice(3)

    def _directory(self, user_type: int):
        return self.library.readers if user_type == READER else self.library.librarians

    def log_in(self, user_type: int) -> LoginResult:
        print_box("Log In")
        username = prompt_text("Username")
        password = prompt_text("Password", hide_input=True)

        account = self._directory(user_type).authenticate(username, password)
        if account is None:
            echo_error("No existing account or incorrect credentials.")
            click.echo("Sign up first or try again.")
            return StayOnLogin
        if user_type == READER:
            echo_success("Reader login successful.")
            return ReaderLoggedIn(account)
        echo_success("Librarian login successful.")
        return LibrarianLoggedIn(account)

    def sign_up(self, user_type: int) -> LoginResult:
        print_box("Sign Up", [
            "Note: Credentials are case sensitive,",
            "so you must remember yours.",
        ])
        username = prompt_text("Set Username")
        password = prompt_text("Set Password", hide_input=True)

        account = run_action(self._directory(user_type).register, username, password)
        if account is None:
            return StayOnLogin
        echo_success(f"Account created successfully for {account.username}.")
        if user_type == READER:
            return ReaderLoggedIn(account)
        return LibrarianLoggedIn(account)

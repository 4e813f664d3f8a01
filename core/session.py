# core/session.py

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional, Union

from core.models.library import LibrarianAccount, ReaderAccount

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    LOGIN_SIGNUP = "login_signup"
    READER_DASHBOARD = "reader_dashboard"
    LIBRARIAN_DASHBOARD = "librarian_dashboard"
    EXIT = "exit"


class LoginOutcome(str, Enum):
    STAY_ON_LOGIN = "stay_on_login"   # Failed login/signup or no user type chosen
    EXIT_APP = "exit_app"             # Exit chosen from the first menu


StayOnLogin = LoginOutcome.STAY_ON_LOGIN
ExitApp = LoginOutcome.EXIT_APP


class ReaderLoggedIn(NamedTuple):
    account: ReaderAccount


class LibrarianLoggedIn(NamedTuple):
    account: LibrarianAccount


LoginResult = Union[LoginOutcome, ReaderLoggedIn, LibrarianLoggedIn]


class DashboardExit(str, Enum):
    LOGGED_OUT = "logged_out"
    ACCOUNT_DELETED = "account_deleted"


class SessionMachine:
    """Navigation between the login screen and the two dashboards.

    LOGIN_SIGNUP -> READER_DASHBOARD / LIBRARIAN_DASHBOARD -> LOGIN_SIGNUP,
    and LOGIN_SIGNUP -> EXIT, which is terminal.
    """

    def __init__(self):
        self.state = AppState.LOGIN_SIGNUP
        self.active_reader: Optional[ReaderAccount] = None
        self.active_librarian: Optional[LibrarianAccount] = None

    def on_login(self, result: LoginResult) -> AppState:
        if self.state != AppState.LOGIN_SIGNUP:
            raise RuntimeError(f"Login result received in state {self.state.value}")

        if isinstance(result, ReaderLoggedIn):
            self.active_reader = result.account
            self.state = AppState.READER_DASHBOARD
        elif isinstance(result, LibrarianLoggedIn):
            self.active_librarian = result.account
            self.state = AppState.LIBRARIAN_DASHBOARD
        elif result == ExitApp:
            self.state = AppState.EXIT
        return self.state

    def on_dashboard_exit(self, outcome: DashboardExit) -> AppState:
        """Log out or account deletion: back to login with the active slots cleared"""
        if self.state not in (AppState.READER_DASHBOARD, AppState.LIBRARIAN_DASHBOARD):
            raise RuntimeError(f"Dashboard exit received in state {self.state.value}")
        logger.info("Leaving %s (%s)", self.state.value, outcome.value)
        self.active_reader = None
        self.active_librarian = None
        self.state = AppState.LOGIN_SIGNUP
        return self.state

    def run(
        self,
        login: Callable[[], LoginResult],
        reader_dashboard: Callable[[ReaderAccount], DashboardExit],
        librarian_dashboard: Callable[[LibrarianAccount], DashboardExit],
    ) -> None:
        """Drive the screens until EXIT"""
        while self.state != AppState.EXIT:
            if self.state == AppState.LOGIN_SIGNUP:
                self.on_login(login())
            elif self.state == AppState.READER_DASHBOARD:
                if self.active_reader is None:
                    logger.error("Reader dashboard reached without an active reader")
                    self.state = AppState.LOGIN_SIGNUP
                    continue
                self.on_dashboard_exit(reader_dashboard(self.active_reader))
            elif self.state == AppState.LIBRARIAN_DASHBOARD:
                if self.active_librarian is None:
                    logger.error("Librarian dashboard reached without an active librarian")
                    self.state = AppState.LOGIN_SIGNUP
                    continue
                self.on_dashboard_exit(librarian_dashboard(self.active_librarian))

# tests/test_session.py

import pytest

from core.models.library import LibrarianAccount, ReaderAccount
from core.session import (
    AppState, DashboardExit, ExitApp, LibrarianLoggedIn, ReaderLoggedIn, SessionMachine, StayOnLogin
)

ALICE = ReaderAccount(username="alice", password="p1")
LIBBY = LibrarianAccount(username="libby", password="secret")


def test_exit_from_login_is_terminal():
    machine = SessionMachine()
    assert machine.on_login(ExitApp) == AppState.EXIT


def test_failed_login_stays_on_login():
    machine = SessionMachine()
    assert machine.on_login(StayOnLogin) == AppState.LOGIN_SIGNUP
    assert machine.active_reader is None


def test_reader_login_and_logout_clears_slot():
    """Test that logging out of the reader dashboard returns to login with no active reader."""
    machine = SessionMachine()
    assert machine.on_login(ReaderLoggedIn(ALICE)) == AppState.READER_DASHBOARD
    assert machine.active_reader == ALICE

    assert machine.on_dashboard_exit(DashboardExit.LOGGED_OUT) == AppState.LOGIN_SIGNUP
    assert machine.active_reader is None


def test_librarian_account_deleted_returns_to_login():
    machine = SessionMachine()
    assert machine.on_login(LibrarianLoggedIn(LIBBY)) == AppState.LIBRARIAN_DASHBOARD
    assert machine.active_librarian == LIBBY

    machine.on_dashboard_exit(DashboardExit.ACCOUNT_DELETED)
    assert machine.state == AppState.LOGIN_SIGNUP
    assert machine.active_librarian is None


def test_out_of_order_events_rejected():
    machine = SessionMachine()
    with pytest.raises(RuntimeError):
        machine.on_dashboard_exit(DashboardExit.LOGGED_OUT)

    machine.on_login(ReaderLoggedIn(ALICE))
    with pytest.raises(RuntimeError):
        machine.on_login(ExitApp)


def test_run_drives_screens_until_exit():
    """Test a full run: failed login, reader session, librarian session, exit."""
    results = iter([StayOnLogin, ReaderLoggedIn(ALICE), LibrarianLoggedIn(LIBBY), ExitApp])
    seen = []

    def reader_dashboard(account):
        seen.append(("reader", account.username))
        return DashboardExit.LOGGED_OUT

    def librarian_dashboard(account):
        seen.append(("librarian", account.username))
        return DashboardExit.LOGGED_OUT

    machine = SessionMachine()
    machine.run(lambda: next(results), reader_dashboard, librarian_dashboard)

    assert seen == [("reader", "alice"), ("librarian", "libby")]
    assert machine.state == AppState.EXIT

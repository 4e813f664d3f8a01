# tests/test_accounts.py

import os
import pytest

from core.errors import AccountNotFoundError, AlreadyExistsError, StorageError, ValidationError
from core.library import Library
from helpers import read_lines, write_lines

LEDGER_FIXTURE = {
    "borrowed_books": [
        "username,title,author,isbn,timestamp",
        "carol,Dune,Frank Herbert,978-11111,2024-01-01T10:00:00+00:00",
        "dave,Emma,Jane Austen,978-22222,2024-01-02T10:00:00+00:00",
    ],
    "reading_history": [
        "username,title,author,isbn,timestamp",
        "dave,Ulysses,James Joyce,978-33333,2023-12-01T10:00:00+00:00",
        "carol,Dune,Frank Herbert,978-11111,2024-01-01T10:00:00+00:00",
        "dave,Emma,Jane Austen,978-22222,2024-01-02T10:00:00+00:00",
        "carol,Emma,Jane Austen,978-22222,",
    ],
    "ratings": [
        "username,isbn,rating",
        "carol,978-11111,5",
        "dave,978-22222,3",
        "dave,broken",
    ],
    "favorites": [
        "username,title,author,isbn",
        "dave,Emma,Jane Austen,978-22222",
        " carol,Dune,Frank Herbert,978-11111",
    ],
    "reviews": [
        "username,isbn,review_text",
        "carol,978-11111,Sand everywhere",
        "dave,978-22222,Witty",
        "carolyn,978-11111,Not carol",
        "dave,978-33333,I \"loved\" it",
    ],
}


@pytest.fixture
def populated(settings):
    """A library on disk with readers carol and dave and ledger rows for both"""
    write_lines(settings.books_file, [
        "title,author,isbn,available,borrowedBy,dueDate",
        "Dune,Frank Herbert,978-11111,FALSE,carol,",
        "Emma,Jane Austen,978-22222,FALSE,dave,",
        "Ulysses,James Joyce,978-33333,TRUE,,",
    ])
    write_lines(settings.readers_file, [
        "username,password,numberOfBooksRead",
        "carol,pw-c,2",
        "dave,pw-d,3",
    ])
    for name, lines in LEDGER_FIXTURE.items():
        write_lines(settings.ledger_file(name), lines)
    library = Library(settings)
    yield library
    library.close()


def test_register_duplicate_rejected(library):
    """Test that a username can only be registered once."""
    library.readers.register("alice", "p1")

    with pytest.raises(AlreadyExistsError):
        library.readers.register("alice", "p2")

    assert library.readers.authenticate("alice", "p1") is not None
    assert library.readers.authenticate("alice", "p2") is None
    assert read_lines(library.settings.readers_file) == [
        "username,password,numberOfBooksRead",
        "alice,p1,0",
    ]


def test_usernames_are_case_sensitive(library):
    library.readers.register("alice", "p1")
    library.readers.register("Alice", "p1")
    assert len(library.readers.list_accounts()) == 2
    assert library.readers.authenticate("ALICE", "p1") is None


def test_register_rejects_blank_credentials(library):
    with pytest.raises(ValidationError):
        library.readers.register("   ", "p1")
    with pytest.raises(ValidationError):
        library.readers.register("alice", "")
    assert library.readers.list_accounts() == []


def test_signup_visible_to_later_login(settings):
    """Test that an account registered in this run can log in without a reload."""
    library = Library(settings)
    library.librarians.register("libby", "secret")

    account = library.librarians.authenticate("libby", "secret")
    assert account is not None
    assert not hasattr(account, "books_read")
    assert read_lines(settings.librarians_file) == ["username,password", "libby,secret"]


def test_rename_cascades_into_ledger(populated, settings):
    """Test that renaming rewrites the account row and every ledger row it owns."""
    renamed = populated.readers.change_username("carol", "carol2")

    assert renamed.username == "carol2"
    assert renamed.books_read == 2
    assert populated.readers.authenticate("carol", "pw-c") is None
    assert populated.readers.authenticate("carol2", "pw-c") is not None
    assert read_lines(settings.readers_file)[1:] == ["carol2,pw-c,2", "dave,pw-d,3"]

    assert [r.username for r in populated.ledger.borrowed_books_of("carol2")] == ["carol2"]
    assert populated.ledger.borrowed_books_of("carol") == []
    assert len(populated.ledger.history_of("carol2")) == 2
    assert read_lines(settings.ledger_file("reviews")) == [
        "username,isbn,review_text",
        "carol2,978-11111,Sand everywhere",
        "dave,978-22222,Witty",
        "carolyn,978-11111,Not carol",
        "dave,978-33333,I \"loved\" it",
    ]
    assert read_lines(settings.ledger_file("favorites"))[1:] == [
        "dave,Emma,Jane Austen,978-22222",
        "carol2,Dune,Frank Herbert,978-11111",
    ]
    assert populated.catalog.find_by_isbn("978-11111", refresh=True).borrowed_by == "carol2"


def test_rename_to_taken_or_blank_name(populated, settings):
    """Test that a rename onto an existing or blank name changes nothing."""
    with pytest.raises(AlreadyExistsError):
        populated.readers.change_username("carol", "dave")
    with pytest.raises(ValidationError):
        populated.readers.change_username("carol", "  ")

    assert read_lines(settings.ledger_file("ratings")) == LEDGER_FIXTURE["ratings"]


def test_rename_unknown_account(populated):
    with pytest.raises(AccountNotFoundError):
        populated.readers.change_username("nobody", "somebody")


def test_change_password(populated):
    """Test that the current password must match and the new one be confirmed."""
    readers = populated.readers
    with pytest.raises(ValidationError, match="Incorrect"):
        readers.change_password("carol", "wrong", "new", "new")
    with pytest.raises(ValidationError, match="do not match"):
        readers.change_password("carol", "pw-c", "new", "other")

    readers.change_password("carol", "pw-c", "new", "new")

    assert readers.authenticate("carol", "pw-c") is None
    assert readers.authenticate("carol", "new") is not None


def test_delete_requires_confirmation(populated, settings):
    """Test that anything other than the DELETE token leaves the account alone."""
    with pytest.raises(ValidationError):
        populated.readers.delete("carol", "yes")

    assert populated.readers.get("carol") is not None
    assert read_lines(settings.ledger_file("reviews")) == LEDGER_FIXTURE["reviews"]


def test_delete_cascades_and_keeps_other_rows_verbatim(populated, settings):
    """Test that deletion removes only rows owned by the user, preserving the rest in order."""
    populated.readers.delete("carol", "delete")

    assert populated.readers.get("carol") is None
    assert read_lines(settings.readers_file) == [
        "username,password,numberOfBooksRead",
        "dave,pw-d,3",
    ]
    for name, lines in LEDGER_FIXTURE.items():
        expected = [line for line in lines if line.split(",")[0].strip() != "carol"]
        assert read_lines(settings.ledger_file(name)) == expected, name

    dune = populated.catalog.find_by_isbn("978-11111", refresh=True)
    assert dune.available is True
    assert dune.borrowed_by is None


def test_delete_librarian_needs_token_too(library):
    library.librarians.register("libby", "secret")
    with pytest.raises(ValidationError):
        library.librarians.delete("libby", "")

    deleted = library.librarians.delete("libby", "DELETE")

    assert deleted.username == "libby"
    assert library.librarians.authenticate("libby", "secret") is None


def test_failed_rename_changes_no_file(populated, settings, monkeypatch):
    """Test that a rename whose commit fails leaves every file and the old name in place."""
    before = {path: path.read_bytes() for path in settings.data_dir.rglob("*.csv")}

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(StorageError):
        populated.readers.change_username("carol", "carol2")

    assert {path: path.read_bytes() for path in settings.data_dir.rglob("*.csv")} == before
    assert list(settings.data_dir.rglob("*.tmp")) == []
    assert populated.readers.get("carol").books_read == 2
    assert populated.readers.get("carol2") is None


def test_unreadable_account_file_is_never_rewritten(populated, settings):
    """Test that updates refuse to rewrite a file they could not read."""
    settings.readers_file.write_bytes(b"username,password,numberOfBooksRead\ncarol,pw-\xff,2\ndave,pw-d,3\n")
    before = settings.readers_file.read_bytes()

    with pytest.raises(StorageError):
        populated.readers.change_password("carol", "pw-c", "new", "new")
    with pytest.raises(StorageError):
        populated.readers.increment_books_read("dave")

    assert settings.readers_file.read_bytes() == before

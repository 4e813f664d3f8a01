import click
from typing import NamedTuple

from core.services.accounts import AccountDirectory, DELETE_CONFIRMATION
from ..utils import (
    echo_success, echo_warning, print_menu, prompt_choice, prompt_text, run_action
)


class AccountChange(NamedTuple):
    username: str
    deleted: bool = False


def manage_account(directory: AccountDirectory, username: str) -> AccountChange:
    """Change username / password or delete the account.

    Returns the (possibly new) username and whether the account is gone.
    """
    while True:
        print_menu("MANAGE ACCOUNT", [
            "Change Username",
            "Change Password",
            "Delete Account",
            "Back to Main Menu",
        ])
        choice = prompt_choice(4)

        if choice == 1:
            new_username = prompt_text("Enter new username")
            account = run_action(directory.change_username, username, new_username)
            if account is not None:
                echo_success(f'Username changed from "{username}" to "{account.username}" successfully.')
                username = account.username
        elif choice == 2:
            current = prompt_text("Enter your current password", hide_input=True)
            new_password = prompt_text("Enter new password", hide_input=True)
            confirm = prompt_text("Confirm new password", hide_input=True)
            if run_action(directory.change_password, username, current, new_password, confirm) is not None:
                echo_success("Password changed successfully.")
        elif choice == 3:
            echo_warning("WARNING: This will permanently delete your account and all associated data.")
            confirmation = prompt_text(f"Type '{DELETE_CONFIRMATION}' to confirm or anything else to cancel")
            if confirmation.strip().upper() != DELETE_CONFIRMATION:
                click.echo("Deletion cancelled.")
                continue
            if run_action(directory.delete, username, confirmation) is None:
                continue
            echo_success("Account deleted.")
            return AccountChange(username, deleted=True)
        else:
            return AccountChange(username)

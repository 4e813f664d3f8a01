"""Interactive menu screens"""
from .login import LoginMenu
from .reader import ReaderDashboard
from .librarian import LibrarianDashboard

__all__ = ['LoginMenu', 'ReaderDashboard', 'LibrarianDashboard']

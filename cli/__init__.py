"""CLI package for the library console"""
from .main import cli, main

__all__ = ['cli', 'main']

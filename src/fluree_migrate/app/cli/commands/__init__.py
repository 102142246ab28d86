"""
CLI command implementations.

- base.py: Base command class and error to exit code mapping
- migrate.py: MigrateCommand
"""

from .base import BaseCommand, exit_code_for
from .migrate import MigrateCommand

__all__ = [
    'BaseCommand',
    'exit_code_for',
    'MigrateCommand',
]

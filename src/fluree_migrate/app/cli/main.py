"""
Command-line entry point.

Usage:
    fluree-migrate migrate --source http://localhost:8090/fdb/acme/crm --output ./migrated
"""

import logging
import sys
from typing import Dict, List, Optional, Type

from ...constants import ExitCode
from .commands import BaseCommand, MigrateCommand
from .commands.base import exit_code_for
from .parsers import create_argument_parser

logger = logging.getLogger(__name__)

COMMANDS: Dict[str, Type[BaseCommand]] = {
    'migrate': MigrateCommand,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    command_class = COMMANDS.get(args.command)
    if command_class is None:
        parser.print_help()
        return ExitCode.SUCCESS

    try:
        return int(command_class().execute(args))
    except KeyboardInterrupt:
        print("\nMigration cancelled.", file=sys.stderr)
        return ExitCode.CANCELLED
    except (FileNotFoundError, PermissionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return exit_code_for(e)
    except Exception as e:
        code = exit_code_for(e)
        if code == ExitCode.ERROR:
            logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return code


if __name__ == '__main__':
    sys.exit(main())

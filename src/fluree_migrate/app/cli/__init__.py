"""
Command-line interface.

- parsers.py: argparse configuration
- helpers.py: logging setup and output helpers
- commands/: command implementations
- main.py: entry point (``fluree-migrate``)
"""

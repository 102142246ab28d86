"""
CLI argument parser configuration.

This module defines the argument parser structure for all CLI commands.

Command Structure:
    - migrate  --source <v2 ledger URL> [--output DIR | --target URL]
"""

import argparse

from ...constants import LoggingConfig


# ============================================================================
# Shared Flag Group Builders
# ============================================================================

def add_config_flags(parser: argparse.ArgumentParser) -> None:
    """Add configuration file flag."""
    parser.add_argument(
        '--config', '-c',
        help='Path to a JSON configuration file (flags override its values)'
    )


def add_source_flags(parser: argparse.ArgumentParser) -> None:
    """Add v2 source ledger flags."""
    parser.add_argument(
        '--source', '-s',
        dest='source_url',
        help='v2 ledger URL, e.g. http://localhost:8090/fdb/acme/crm'
    )
    parser.add_argument(
        '--source-api-key',
        help='API key for the v2 ledger (prompted for on HTTP 401 otherwise)'
    )


def add_iri_flags(parser: argparse.ArgumentParser) -> None:
    """Add base/vocab IRI and context flags."""
    parser.add_argument(
        '--base',
        help='Base IRI for entity ids (default: <source>/ids/)'
    )
    parser.add_argument(
        '--vocab',
        help='Vocabulary IRI for classes and properties (default: <source>/terms/)'
    )
    parser.add_argument(
        '--context', '-C',
        action='append',
        metavar='PREFIX=IRI',
        help='Extra @context prefix for the vocabulary (repeatable), e.g. schema=http://schema.org/'
    )


def add_shape_flags(parser: argparse.ArgumentParser) -> None:
    """Add SHACL shape flags."""
    parser.add_argument(
        '--shacl',
        action='store_true',
        default=None,
        help='Include SHACL shapes in the vocabulary'
    )
    parser.add_argument(
        '--closed-shapes',
        action='store_true',
        default=None,
        help='Emit closed SHACL shapes (implies --shacl)'
    )


def add_output_flags(parser: argparse.ArgumentParser) -> None:
    """Add output sink flags."""
    parser.add_argument(
        '--output', '-o',
        dest='output_dir',
        help='Directory for 0_vocab.jsonld and N_data.jsonld (default: print to stdout)'
    )
    parser.add_argument(
        '--target', '-t',
        dest='target_url',
        help='v3 server URL to transact into, e.g. http://localhost:58090'
    )
    parser.add_argument(
        '--target-api-key',
        help='API key for the v3 server'
    )
    parser.add_argument(
        '--ledger',
        help='Target ledger name (default: last two path segments of the source URL)'
    )
    parser.add_argument(
        '--create-ledger',
        action='store_true',
        default=None,
        help='Create the target ledger with the vocabulary transaction'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        help='Entities per data file or transaction (default: 2000)'
    )


def add_behaviour_flags(parser: argparse.ArgumentParser) -> None:
    """Add schema strictness and interaction flags."""
    parser.add_argument(
        '--lenient-schema',
        action='store_true',
        help='Warn instead of failing when a ref predicate targets a missing collection'
    )
    parser.add_argument(
        '--no-prompt',
        action='store_true',
        help='Never prompt for API keys; fail on HTTP 401 instead'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )


def add_logging_flags(parser: argparse.ArgumentParser) -> None:
    """Add logging flags."""
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        type=str.upper,
        help=f'Log level (default: {LoggingConfig.DEFAULT_LOG_LEVEL})'
    )
    parser.add_argument(
        '--log-file',
        help='Also write logs to this file (rotated)'
    )
    parser.add_argument(
        '--log-format',
        choices=list(LoggingConfig.SUPPORTED_FORMATS),
        help='Log format (default: text)'
    )


# ============================================================================
# Main Parser Factory
# ============================================================================

def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the main argument parser.

    Returns:
        Configured ArgumentParser with all subcommands.
    """
    parser = argparse.ArgumentParser(
        prog='fluree-migrate',
        description="Fluree v2 to v3 (JSON-LD) ledger migration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print vocabulary and data documents to stdout
    %(prog)s migrate --source http://localhost:8090/fdb/acme/crm

    # Write files with closed SHACL shapes and custom IRIs
    %(prog)s migrate -s http://localhost:8090/fdb/acme/crm -o ./migrated \\
        --closed-shapes --vocab https://example.com/terms/ --base https://example.com/ids/

    # Transact into a new v3 ledger
    %(prog)s migrate -s http://localhost:8090/fdb/acme/crm --target http://localhost:58090 \\
        --ledger acme/crm --create-ledger
        """,
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    _add_migrate_parser(subparsers)

    return parser


def _add_migrate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Add the migrate command parser."""
    migrate_parser = subparsers.add_parser(
        'migrate',
        help='Migrate a v2 ledger schema and data to JSON-LD'
    )
    add_config_flags(migrate_parser)
    add_source_flags(migrate_parser)
    add_iri_flags(migrate_parser)
    add_shape_flags(migrate_parser)
    add_output_flags(migrate_parser)
    add_behaviour_flags(migrate_parser)
    add_logging_flags(migrate_parser)

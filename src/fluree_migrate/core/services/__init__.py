"""
Migration services: orchestration and output sinks.
"""

from .orchestrator import (
    MigrationOrchestrator,
    MigrationResult,
    MigrationState,
    STAGE_DESCRIPTIONS,
    partition,
)
from .sinks import FileSink, OutputSink, StdoutSink, TargetSink

__all__ = [
    'MigrationOrchestrator',
    'MigrationResult',
    'MigrationState',
    'STAGE_DESCRIPTIONS',
    'partition',
    'FileSink',
    'OutputSink',
    'StdoutSink',
    'TargetSink',
]

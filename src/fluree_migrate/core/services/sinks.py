"""
Output sinks.

Exactly one sink is active per run. The orchestrator hands it the
vocabulary document first, then each data partition in order, then calls
``close()`` to confirm completion.

- FileSink: ``0_vocab.jsonld``, ``1_data.jsonld``, ... written atomically
- StdoutSink: each document printed to a text stream
- TargetSink: each document transacted into a v3 ledger
"""

import logging
import os
import sys
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, TextIO

from ...constants import MigrationDefaults
from ...formats.jsonld.vocabulary_emitter import render_document
from ...shared.models import JsonLdDocument
from ..errors import SinkError
from ..platform.target_client import FlureeTargetClient

logger = logging.getLogger(__name__)


class OutputSink(ABC):
    """Destination for the vocabulary and data documents."""

    name: str = "sink"

    @abstractmethod
    def write_vocab(self, document: JsonLdDocument) -> None:
        """Commit the vocabulary document.

        Raises:
            SinkError: If the document cannot be written or transacted.
        """

    @abstractmethod
    def write_data(self, index: int, document: JsonLdDocument) -> None:
        """Commit data partition ``index`` (starting at 1).

        Raises:
            SinkError: If the document cannot be written or transacted.
        """

    def close(self) -> None:
        """Confirm that everything written so far is durable."""

    def describe(self) -> str:
        return self.name


class FileSink(OutputSink):
    """
    Writes each document to its own file in an output directory.

    Files are written to a temporary name in the same directory and renamed
    into place, so a file that exists is always complete.

    Writing the vocabulary first removes data partitions left by an earlier
    run, so the directory only ever holds one run's partitions.

    Attributes:
        output_dir: Target directory (created if missing).
        written: Paths written so far, in order.
    """

    name = "file"

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)
        self.written: List[Path] = []

    def write_vocab(self, document: JsonLdDocument) -> None:
        self._remove_stale_partitions()
        self._write(MigrationDefaults.VOCAB_FILENAME, document)

    def write_data(self, index: int, document: JsonLdDocument) -> None:
        self._write(MigrationDefaults.DATA_FILENAME_TEMPLATE.format(index=index), document)

    def _remove_stale_partitions(self) -> None:
        """Delete data partitions left in the directory by an earlier run."""
        if not self.output_dir.is_dir():
            return
        suffix = MigrationDefaults.DATA_FILENAME_TEMPLATE.format(index="")
        for path in sorted(self.output_dir.glob(f"*{suffix}")):
            if not path.name[:-len(suffix)].isdigit():
                continue
            try:
                path.unlink()
            except OSError as e:
                raise SinkError(f"Could not remove stale partition {path}: {e}")
            logger.info(f"Removed stale partition {path}")

    def _write(self, filename: str, document: JsonLdDocument) -> None:
        path = self.output_dir / filename
        tmp_path: Optional[str] = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=str(self.output_dir))
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(render_document(document))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise SinkError(f"Could not write {path}: {e}")
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

        self.written.append(path)
        logger.info(f"Wrote {path} ({len(document)} nodes)")

    def describe(self) -> str:
        return f"files in {self.output_dir}"


class StdoutSink(OutputSink):
    """Prints each document to a text stream (stdout by default)."""

    name = "stdout"

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write_vocab(self, document: JsonLdDocument) -> None:
        self._print(document)

    def write_data(self, index: int, document: JsonLdDocument) -> None:
        self._print(document)

    def _print(self, document: JsonLdDocument) -> None:
        try:
            self.stream.write(render_document(document))
        except OSError as e:
            raise SinkError(f"Could not write to {self.name}: {e}")

    def close(self) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"Could not flush {self.name}: {e}")


class TargetSink(OutputSink):
    """
    Transacts each document into a v3 ledger.

    The vocabulary goes first; with ``create_ledger`` it is the ledger's
    creating transaction. Each data partition is one transaction.
    Transactions already acknowledged are not undone when a later one fails.
    """

    name = "target"

    def __init__(self, client: FlureeTargetClient, ledger: str, create_ledger: bool = False):
        self.client = client
        self.ledger = ledger
        self.create_ledger = create_ledger
        self.transactions = 0

    def write_vocab(self, document: JsonLdDocument) -> None:
        if self.create_ledger:
            self.client.create_ledger(self.ledger, document.context, document.graph)
        else:
            self.client.transact(self.ledger, document.context, document.graph)
        self.transactions += 1

    def write_data(self, index: int, document: JsonLdDocument) -> None:
        self.client.transact(self.ledger, document.context, document.graph)
        self.transactions += 1
        logger.debug(f"Partition {index} acknowledged by {self.client.base_url}")

    def describe(self) -> str:
        return f"ledger '{self.ledger}' at {self.client.base_url}"

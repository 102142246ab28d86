"""
Migration orchestration.

Runs one migration as a linear state machine:

    FETCHING → MODEL_BUILT → VOCAB_EMITTED → DATA_TRANSFORMED → DISPATCHED → DONE

with FAILED reachable from every non-terminal state. Nothing is handed to
the output sink before the data transformation has completed, so a failed
transformation never leaves a vocabulary artifact behind.

Usage:
    config = MigrationConfig.from_file("config.json").validate()
    result = MigrationOrchestrator.from_config(config).run()
    print(result.get_summary())
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional

from tqdm import tqdm

from ...config import SINK_FILE, SINK_TARGET, MigrationConfig
from ...constants import MigrationDefaults
from ...formats.jsonld import (
    DataTransformer,
    SchemaModelBuilder,
    ShapeGenerator,
    VocabularyEmitter,
)
from ...shared.models import JsonLdDocument, SchemaModel, ShapeSet, WarningLog
from ..errors import MigrationError
from ..iri import IRIResolver
from ..platform.auth import CredentialProvider, StaticCredentialProvider
from ..platform.source_client import FlureeSourceClient
from ..platform.target_client import FlureeTargetClient
from .sinks import FileSink, OutputSink, StdoutSink, TargetSink

logger = logging.getLogger(__name__)


class MigrationState(str, Enum):
    """State of a migration run."""
    FETCHING = "fetching"
    MODEL_BUILT = "model_built"
    VOCAB_EMITTED = "vocab_emitted"
    DATA_TRANSFORMED = "data_transformed"
    DISPATCHED = "dispatched"
    DONE = "done"
    FAILED = "failed"


# Work performed when leaving each state
STAGE_DESCRIPTIONS: Dict[MigrationState, str] = {
    MigrationState.FETCHING: "schema fetch and model build",
    MigrationState.MODEL_BUILT: "vocabulary emission",
    MigrationState.VOCAB_EMITTED: "data fetch and transformation",
    MigrationState.DATA_TRANSFORMED: "dispatch to the output sink",
    MigrationState.DISPATCHED: "output sink completion",
}

_TRANSITIONS: Dict[MigrationState, MigrationState] = {
    MigrationState.FETCHING: MigrationState.MODEL_BUILT,
    MigrationState.MODEL_BUILT: MigrationState.VOCAB_EMITTED,
    MigrationState.VOCAB_EMITTED: MigrationState.DATA_TRANSFORMED,
    MigrationState.DATA_TRANSFORMED: MigrationState.DISPATCHED,
    MigrationState.DISPATCHED: MigrationState.DONE,
}


@dataclass
class MigrationResult:
    """
    Outcome of a migration run.

    Attributes:
        state: Final state (DONE or FAILED).
        failed_stage: State the run was in when it failed.
        error: The fatal error, if any.
        warnings: Schema and transformation warnings.
        classes: Classes in the schema model.
        properties: Properties in the schema model.
        shapes: Node shapes emitted.
        entities: Entity records transformed.
        partitions: Data documents dispatched.
        duration_seconds: Wall-clock duration of the run.
    """
    state: MigrationState = MigrationState.FETCHING
    failed_stage: Optional[MigrationState] = None
    error: Optional[MigrationError] = None
    warnings: WarningLog = field(default_factory=WarningLog)
    classes: int = 0
    properties: int = 0
    shapes: int = 0
    entities: int = 0
    partitions: int = 0
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == MigrationState.DONE

    def get_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Migration Summary:",
            f"  State: {self.state.value}",
            f"  Classes: {self.classes}",
            f"  Properties: {self.properties}",
            f"  Shapes: {self.shapes}",
            f"  Entities: {self.entities:,}",
            f"  Data partitions: {self.partitions}",
            f"  Warnings: {len(self.warnings)}",
        ]
        for kind, count in sorted(self.warnings.counts().items()):
            lines.append(f"    {kind}: {count}")
        if self.failed_stage is not None:
            lines.append(f"  Failed during: {STAGE_DESCRIPTIONS.get(self.failed_stage, self.failed_stage.value)}")
        if self.error is not None:
            lines.append(f"  Error: {self.error}")
        if self.duration_seconds > 0:
            rate = self.entities / self.duration_seconds if self.entities else 0
            lines.append(f"  Duration: {self.duration_seconds:.2f}s ({rate:.0f} entities/sec)")
        return "\n".join(lines)


def partition(nodes: List[Dict[str, Any]], batch_size: int) -> Iterator[List[Dict[str, Any]]]:
    """Split nodes into consecutive batches of at most ``batch_size``, preserving order."""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    for start in range(0, len(nodes), batch_size):
        yield nodes[start:start + batch_size]


class MigrationOrchestrator:
    """
    Drives one migration from source schema to output sink.

    Args:
        source: Client for the v2 ledger.
        resolver: IRI resolver shared by every stage.
        sink: Output sink.
        shacl: Emit SHACL shapes in the vocabulary document.
        closed_shapes: Emit closed shapes (implies ``shacl``).
        batch_size: Entities per data partition.
        strict_schema: Fail on ref targets naming absent collections.
        extra_context: Additional prefixes for the vocabulary ``@context``.
        show_progress: Show tqdm progress bars.
    """

    def __init__(
        self,
        source: FlureeSourceClient,
        resolver: IRIResolver,
        sink: OutputSink,
        shacl: bool = False,
        closed_shapes: bool = False,
        batch_size: int = MigrationDefaults.BATCH_SIZE,
        strict_schema: bool = True,
        extra_context: Optional[Mapping[str, str]] = None,
        show_progress: bool = True,
    ):
        self.source = source
        self.resolver = resolver
        self.sink = sink
        self.shacl = shacl or closed_shapes
        self.closed_shapes = closed_shapes
        self.batch_size = batch_size
        self.strict_schema = strict_schema
        self.extra_context = dict(extra_context or {})
        self.show_progress = show_progress
        self._state = MigrationState.FETCHING
        self.history: List[MigrationState] = [MigrationState.FETCHING]

    @classmethod
    def from_config(
        cls,
        config: MigrationConfig,
        credential_provider: Optional[CredentialProvider] = None,
        show_progress: bool = True,
        sink: Optional[OutputSink] = None,
    ) -> 'MigrationOrchestrator':
        """
        Build an orchestrator, its clients and its sink from a configuration.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        config.validate()
        resolver = IRIResolver(config.source_url, base=config.base, vocab=config.vocab)

        source = FlureeSourceClient(
            resolver.source_url,
            api_key=config.source_api_key,
            credential_provider=credential_provider or StaticCredentialProvider(),
        )

        if sink is None:
            if config.sink_kind == SINK_TARGET:
                target = FlureeTargetClient(
                    config.target_url,
                    api_key=config.target_api_key,
                    credential_provider=credential_provider or StaticCredentialProvider(),
                )
                sink = TargetSink(target, config.ledger or resolver.ledger_name(), config.create_ledger)
            elif config.sink_kind == SINK_FILE:
                sink = FileSink(config.output_dir)
            else:
                sink = StdoutSink()

        return cls(
            source=source,
            resolver=resolver,
            sink=sink,
            shacl=config.shacl,
            closed_shapes=config.closed_shapes,
            batch_size=config.batch_size,
            strict_schema=config.strict_schema,
            extra_context=config.extra_context,
            show_progress=show_progress,
        )

    @property
    def state(self) -> MigrationState:
        return self._state

    def _advance(self) -> None:
        next_state = _TRANSITIONS[self._state]
        logger.debug(f"Migration state: {self._state.value} -> {next_state.value}")
        self._state = next_state
        self.history.append(next_state)

    def _fail(self) -> MigrationState:
        failed_stage = self._state
        self._state = MigrationState.FAILED
        self.history.append(MigrationState.FAILED)
        return failed_stage

    def run(self) -> MigrationResult:
        """
        Run the migration.

        Fatal errors (MigrationError) are caught and reported in the result
        with the stage they occurred in. Any other exception, including
        KeyboardInterrupt, moves the run to FAILED and propagates.

        Returns:
            MigrationResult in state DONE or FAILED.
        """
        if self._state != MigrationState.FETCHING:
            raise RuntimeError("A MigrationOrchestrator can only run once")

        start_time = time.time()
        result = MigrationResult()
        logger.info(f"Migrating {self.resolver.source_url} to {self.sink.describe()}")

        try:
            model = self._build_model(result)
            self._advance()

            shapes = self._generate_shapes(model, result)
            vocab_document = VocabularyEmitter(self.extra_context).emit(model, shapes)
            self._advance()

            data_documents = self._transform(model, result)
            self._advance()

            self._dispatch(vocab_document, data_documents, result)
            self._advance()

            self.sink.close()
            self._advance()

        except MigrationError as e:
            result.failed_stage = self._fail()
            result.error = e
            logger.error(f"Migration failed during {STAGE_DESCRIPTIONS[result.failed_stage]}: {e}")
        except BaseException:
            self._fail()
            raise
        finally:
            result.state = self._state
            result.duration_seconds = time.time() - start_time

        logger.info(f"Migration finished in state {result.state.value} with {len(result.warnings)} warnings")
        return result

    def _build_model(self, result: MigrationResult) -> SchemaModel:
        raw_schema = self.source.fetch_schema()
        model, schema_warnings = SchemaModelBuilder(self.resolver, strict=self.strict_schema).build(raw_schema)
        result.warnings.extend_schema(schema_warnings)
        result.classes = len(model.classes)
        result.properties = len(model.properties)
        return model

    def _generate_shapes(self, model: SchemaModel, result: MigrationResult) -> Optional[ShapeSet]:
        if not self.shacl:
            return None
        shapes = ShapeGenerator(self.resolver, closed=self.closed_shapes).generate(model)
        result.shapes = len(shapes)
        return shapes

    def _transform(self, model: SchemaModel, result: MigrationResult) -> List[JsonLdDocument]:
        """Fetch and transform every collection, then partition the nodes."""
        transformer = DataTransformer(model, self.resolver)
        nodes: List[Dict[str, Any]] = []

        with tqdm(desc="Transforming", unit="entity", disable=not self.show_progress) as progress:
            for class_def in model.classes.values():
                progress.set_postfix_str(class_def.source_name)
                for document in transformer.transform(self.source.iter_entities(class_def.source_name)):
                    nodes.append(document.node)
                    progress.update(1)

        transformer.finalize()
        result.warnings.extend_transform(transformer.warnings)
        result.entities = transformer.record_count

        context = transformer.data_context()
        documents = [JsonLdDocument(context=context, graph=batch) for batch in partition(nodes, self.batch_size)]
        logger.info(f"Transformed {len(nodes)} entities into {len(documents)} data partitions")
        return documents

    def _dispatch(
        self,
        vocab_document: JsonLdDocument,
        data_documents: List[JsonLdDocument],
        result: MigrationResult,
    ) -> None:
        self.sink.write_vocab(vocab_document)
        for index, document in enumerate(
            tqdm(data_documents, desc="Dispatching", unit="partition", disable=not self.show_progress),
            start=1,
        ):
            self.sink.write_data(index, document)
            result.partitions = index

"""
Entity data transformation.

Turns v2 EntityRecords into JSON-LD nodes, one node per record, lazily and
in input order. Problems with a single record or value never abort the
stream: they are recorded as TransformWarning on the affected document and
the remaining values are still emitted.

Reference targets are only known once every record has been seen, so
unresolved references are reported by ``finalize()`` after the pass.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ...constants import SourceQueryConfig
from ...core.iri import IRIResolver
from ...shared.models import (
    CardinalityWarning,
    ClassDef,
    Datatype,
    EntityDocument,
    EntityRecord,
    MalformedValueWarning,
    PropertyDef,
    SchemaModel,
    TransformWarning,
    UnknownPropertyWarning,
    UnresolvedReferenceWarning,
    UnresolvedTypeWarning,
)
from .namespaces import PREFIXES
from .values import coerce_value, passthrough_value

logger = logging.getLogger(__name__)


class DataTransformer:
    """
    Transforms EntityRecords into JSON-LD entity nodes.

    One instance is used for a whole run: it remembers every subject it has
    transformed and every reference it has emitted, so that ``finalize()``
    can report references to subjects that never appeared.

    Attributes:
        warnings: Every TransformWarning recorded so far, in order.

    Example:
        >>> transformer = DataTransformer(model, resolver)
        >>> nodes = [doc.node for doc in transformer.transform(records)]
        >>> transformer.finalize()
        []
    """

    def __init__(self, model: SchemaModel, resolver: IRIResolver):
        self.model = model
        self.resolver = resolver
        self.warnings: List[TransformWarning] = []

        self._properties = {prop.source_name: prop for prop in model.properties.values()}
        self._classes_by_source = {c.source_name: c for c in model.classes.values()}
        # _collection subjects carry the collection's partition number in their low bits
        partition_mask = (1 << SourceQueryConfig.SUBJECT_PARTITION_BITS) - 1
        self._classes_by_partition = {
            int(c.source_id) & partition_mask: c for c in model.classes.values() if c.source_id is not None
        }
        self._seen: Set[str] = set()
        self._references: List[Tuple[str, str, str]] = []
        self._records = 0

    @property
    def record_count(self) -> int:
        return self._records

    def data_context(self) -> Dict[str, Any]:
        """
        ``@context`` for data documents.

        Declares ``@vocab``, the ``xsd`` and ``geo`` prefixes used by typed
        literals, and one term per schema property: refs are ``@type: @id``
        and multi-valued properties are ``@container: @set``.
        """
        context: Dict[str, Any] = {
            "@vocab": self.resolver.vocab_iri,
            "xsd": PREFIXES["xsd"],
            "geo": PREFIXES["geo"],
        }
        for prop in self.model.sorted_properties():
            term: Dict[str, Any] = {"@id": prop.iri}
            if prop.is_ref:
                term["@type"] = "@id"
            if prop.multi_valued:
                term["@container"] = "@set"
            context[prop.name] = term
        return context

    def transform(self, records: Iterable[EntityRecord]) -> Iterator[EntityDocument]:
        """Lazily transform records, one EntityDocument per record, in input order."""
        for record in records:
            yield self.transform_record(record)

    def transform_record(self, record: EntityRecord) -> EntityDocument:
        """Transform one record; problems become warnings on the returned document."""
        self._records += 1
        subject_id = str(record.subject_id)
        self._seen.add(subject_id)
        warnings: List[TransformWarning] = []

        node: Dict[str, Any] = {"@id": self.resolver.entity_iri(subject_id)}

        class_def = self._infer_class(record)
        if class_def is not None:
            node["@type"] = class_def.iri
        else:
            warnings.append(UnresolvedTypeWarning(
                subject_id,
                f"collection could not be determined (declared: {record.collection!r}); emitted without @type",
            ))

        for key, raw in record.values.items():
            if key.startswith("_"):
                continue
            local = key.rsplit("/", 1)[-1]
            prop = self._properties.get(local)
            if prop is None:
                self._emit_unknown(node, subject_id, key, raw, record.asserted_types.get(key), warnings)
            else:
                self._emit_property(node, subject_id, prop, raw, warnings)

        for warning in warnings:
            logger.warning(str(warning))
        self.warnings.extend(warnings)
        return EntityDocument(subject_id=subject_id, node=node, warnings=warnings)

    def finalize(self) -> List[UnresolvedReferenceWarning]:
        """
        Report references whose target subject was never transformed.

        Returns one warning per distinct (subject, predicate, target); the
        warnings are also appended to ``self.warnings``.
        """
        reported: Set[Tuple[str, str, str]] = set()
        unresolved: List[UnresolvedReferenceWarning] = []
        for subject_id, predicate, target in self._references:
            key = (subject_id, predicate, target)
            if target in self._seen or key in reported:
                continue
            reported.add(key)
            unresolved.append(UnresolvedReferenceWarning(
                subject_id,
                f"references {self.resolver.entity_iri(target)}, which is not in the migrated data",
                predicate=predicate,
                target=target,
            ))

        for warning in unresolved:
            logger.warning(str(warning))
        self.warnings.extend(unresolved)
        return unresolved

    def _infer_class(self, record: EntityRecord) -> Optional[ClassDef]:
        """Declared collection, then ``collection/`` key prefixes, then the subject id partition."""
        if record.collection:
            class_def = self._classes_by_source.get(record.collection)
            if class_def is not None:
                return class_def

        for key in record.values:
            if "/" in key:
                class_def = self._classes_by_source.get(key.split("/", 1)[0])
                if class_def is not None:
                    return class_def

        subject_id = str(record.subject_id)
        if subject_id.isdigit():
            return self._classes_by_partition.get(int(subject_id) >> SourceQueryConfig.SUBJECT_PARTITION_BITS)
        return None

    def _emit_unknown(
        self,
        node: Dict[str, Any],
        subject_id: str,
        key: str,
        raw: Any,
        asserted: Optional[Datatype],
        warnings: List[TransformWarning],
    ) -> None:
        if raw is None or raw == []:
            return
        iri = self.resolver.term_iri(key)
        if asserted is None:
            node[iri] = passthrough_value(raw, self.resolver.entity_iri)
        else:
            values = self._coerce_asserted(subject_id, key, raw, asserted, warnings)
            if not values:
                return
            node[iri] = values if isinstance(raw, list) else values[0]
        warnings.append(UnknownPropertyWarning(
            subject_id,
            f"predicate is not in the schema; value emitted under {iri}",
            predicate=key,
        ))

    def _coerce_asserted(
        self,
        subject_id: str,
        key: str,
        raw: Any,
        datatype: Datatype,
        warnings: List[TransformWarning],
    ) -> List[Any]:
        """Coerce values of an unknown predicate by the datatype asserted at write time."""
        values: List[Any] = []
        for value in (raw if isinstance(raw, list) else [raw]):
            if value is None:
                continue
            try:
                coerced = coerce_value(value, datatype)
            except (ValueError, TypeError) as e:
                warnings.append(MalformedValueWarning(
                    subject_id,
                    f"{datatype} value {value!r} skipped: {e}",
                    predicate=key,
                ))
                continue
            if datatype is Datatype.REF:
                self._references.append((subject_id, key, coerced))
                # No context term exists for this predicate
                coerced = {"@id": self.resolver.entity_iri(coerced)}
            values.append(coerced)
        return values

    def _emit_property(
        self,
        node: Dict[str, Any],
        subject_id: str,
        prop: PropertyDef,
        raw: Any,
        warnings: List[TransformWarning],
    ) -> None:
        raw_values = raw if isinstance(raw, list) else [raw]
        values: List[Any] = []
        for value in raw_values:
            if value is None:
                continue
            try:
                coerced = coerce_value(value, prop.datatype)
            except (ValueError, TypeError) as e:
                warnings.append(MalformedValueWarning(
                    subject_id,
                    f"{prop.datatype} value {value!r} skipped: {e}",
                    predicate=prop.name,
                ))
                continue
            if prop.is_ref:
                self._references.append((subject_id, prop.name, coerced))
                coerced = self.resolver.entity_iri(coerced)
            values.append(coerced)

        if not values:
            return
        if prop.multi_valued:
            node[prop.name] = values
        elif len(values) == 1:
            node[prop.name] = values[0]
        else:
            node[prop.name] = values
            warnings.append(CardinalityWarning(
                subject_id,
                f"single-valued property has {len(values)} values; all kept",
                predicate=prop.name,
            ))

"""
SchemaModel construction from a raw v2 schema.

The v2 schema arrives as flat records: ``_collection`` rows and
``_predicate`` rows named ``collection/predicate`` with facet flags. This
module turns them into the typed SchemaModel arena.

Fatal problems raise SchemaError; relaxations are returned as SchemaWarning.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ...core.errors import SchemaError
from ...core.iri import IRIResolver
from ...shared.models import ClassDef, Datatype, PropertyDef, SchemaModel, SchemaWarning
from .naming import split_predicate_name, standardize_class_name, standardize_property_name

logger = logging.getLogger(__name__)


@dataclass
class _ClassDraft:
    name: str
    source_name: str
    doc: Optional[str] = None
    source_id: Optional[int] = None
    properties: List[str] = field(default_factory=list)


@dataclass
class _PropertyDraft:
    name: str
    source_name: str
    datatype: Datatype
    multi_valued: bool
    unique: bool
    indexed: bool
    target_source: Optional[str] = None
    doc: Optional[str] = None
    first_seen: str = ""


class SchemaModelBuilder:
    """
    Builds a SchemaModel from raw v2 schema records.

    Handles:
    - Filtering of genesis/system predicates and ``_``-prefixed collections
    - Name standardization (``bank_account`` → ``BankAccount``, ``first_name`` → ``firstName``)
    - Merging of predicates that share a local name across collections
    - Resolution of ``restrictCollection`` targets

    Example:
        >>> builder = SchemaModelBuilder(IRIResolver("http://localhost:8090/fdb/acme/crm"))
        >>> model, warnings = builder.build(raw_schema)
    """

    def __init__(self, resolver: IRIResolver, strict: bool = True):
        """
        Args:
            resolver: IRI resolver for class and property IRIs.
            strict: When False, a ``restrictCollection`` naming an absent
                collection is downgraded to a warning instead of a SchemaError.
        """
        self.resolver = resolver
        self.strict = strict

    def build(self, raw_schema: Mapping[str, Any]) -> Tuple[SchemaModel, List[SchemaWarning]]:
        """
        Build the schema model.

        Args:
            raw_schema: Mapping with ``collections``, ``predicates`` (or
                ``current_predicates``) and optionally ``initial_predicates``.

        Returns:
            Tuple of (SchemaModel, schema warnings).

        Raises:
            SchemaError: On duplicate or colliding names, unknown types,
                conflicting shared predicates or (strict mode) absent ref targets.
        """
        if not isinstance(raw_schema, Mapping):
            raise SchemaError(f"Schema must be a mapping, got {type(raw_schema).__name__}")

        warnings: List[SchemaWarning] = []
        system_ids = self._system_predicate_ids(raw_schema)

        classes = self._collect_collections(raw_schema.get("collections") or [])
        properties = self._collect_predicates(
            raw_schema.get("predicates", raw_schema.get("current_predicates")) or [],
            system_ids,
            classes,
            warnings,
        )
        targets = self._resolve_targets(properties, classes, warnings)

        model = self._freeze(classes, properties, targets)
        logger.info(
            f"Built schema model with {len(model.classes)} classes and "
            f"{len(model.properties)} properties"
        )
        for warning in warnings:
            logger.warning(f"Schema: {warning}")
        return model, warnings

    @staticmethod
    def _system_predicate_ids(raw_schema: Mapping[str, Any]) -> Set[Any]:
        initial = raw_schema.get("initial_predicates") or []
        ids: Set[Any] = set()
        for item in initial:
            ids.add(item.get("_id") if isinstance(item, Mapping) else item)
        return ids

    def _collect_collections(self, records: List[Mapping[str, Any]]) -> Dict[str, _ClassDraft]:
        """Create class drafts keyed by v2 collection name."""
        classes: Dict[str, _ClassDraft] = {}
        names: Dict[str, str] = {}

        for record in records:
            source_name = record.get("name") if isinstance(record, Mapping) else None
            if not source_name or not isinstance(source_name, str):
                raise SchemaError(f"Collection record has no name: {record!r}")
            if source_name.startswith("_"):
                continue
            if source_name in classes:
                raise SchemaError("duplicate collection name", subject=source_name)

            name = standardize_class_name(source_name)
            if name in names:
                raise SchemaError(
                    f"collection name collides with '{names[name]}' (both standardize to '{name}')",
                    subject=source_name,
                )
            names[name] = source_name
            classes[source_name] = _ClassDraft(
                name=name,
                source_name=source_name,
                doc=record.get("doc"),
                source_id=record.get("_id"),
            )
            logger.debug(f"Collection {source_name} -> class {name}")

        return classes

    def _collect_predicates(
        self,
        records: List[Mapping[str, Any]],
        system_ids: Set[Any],
        classes: Dict[str, _ClassDraft],
        warnings: List[SchemaWarning],
    ) -> Dict[str, _PropertyDraft]:
        """Create property drafts keyed by standardized property name."""
        properties: Dict[str, _PropertyDraft] = {}
        seen_full_names: Set[str] = set()
        class_names = {draft.name: source for source, draft in classes.items()}

        for record in records:
            if not isinstance(record, Mapping):
                raise SchemaError(f"Predicate record must be a mapping: {record!r}")
            if record.get("_id") is not None and record.get("_id") in system_ids:
                continue

            full_name = record.get("name")
            if not full_name or not isinstance(full_name, str):
                raise SchemaError(f"Predicate record has no name: {dict(record)!r}")
            try:
                collection, local_name = split_predicate_name(full_name)
            except ValueError as e:
                raise SchemaError(str(e), subject=full_name)
            if collection.startswith("_"):
                continue

            if full_name in seen_full_names:
                raise SchemaError("duplicate predicate name", subject=full_name)
            seen_full_names.add(full_name)

            if "type" not in record or record["type"] is None:
                raise SchemaError("predicate has no type", subject=full_name)
            try:
                datatype = Datatype.parse(record["type"])
            except ValueError as e:
                raise SchemaError(str(e), subject=full_name)

            if collection not in classes:
                name = standardize_class_name(collection)
                if name in class_names:
                    raise SchemaError(
                        f"collection name collides with '{class_names[name]}'",
                        subject=collection,
                    )
                logger.info(f"Collection '{collection}' has no collection record; creating it from {full_name}")
                classes[collection] = _ClassDraft(name=name, source_name=collection)
                class_names[name] = collection

            draft = self._predicate_draft(record, full_name, local_name, datatype, warnings)
            existing = properties.get(draft.name)
            if existing is None:
                properties[draft.name] = draft
            else:
                self._merge(existing, draft, full_name, warnings)

            owner = classes[collection]
            if draft.name not in owner.properties:
                owner.properties.append(draft.name)

        return properties

    @staticmethod
    def _predicate_draft(
        record: Mapping[str, Any],
        full_name: str,
        local_name: str,
        datatype: Datatype,
        warnings: List[SchemaWarning],
    ) -> _PropertyDraft:
        multi_valued = bool(record.get("multi"))
        unique = bool(record.get("unique"))
        if unique and multi_valued:
            warnings.append(SchemaWarning(
                full_name,
                "unique=true on a multi-valued predicate; unique relaxed to false",
            ))
            unique = False

        target_source = record.get("restrictCollection")
        if target_source and not datatype.is_ref:
            warnings.append(SchemaWarning(
                full_name,
                f"restrictCollection '{target_source}' ignored on a {datatype} predicate",
            ))
            target_source = None

        return _PropertyDraft(
            name=standardize_property_name(local_name),
            source_name=local_name,
            datatype=datatype,
            multi_valued=multi_valued,
            unique=unique,
            indexed=bool(record.get("index")),
            target_source=target_source or None,
            doc=record.get("doc"),
            first_seen=full_name,
        )

    @staticmethod
    def _merge(
        existing: _PropertyDraft,
        draft: _PropertyDraft,
        full_name: str,
        warnings: List[SchemaWarning],
    ) -> None:
        """Merge a predicate that shares its local name with an earlier one."""
        if existing.source_name != draft.source_name:
            raise SchemaError(
                f"predicate name collides with '{existing.first_seen}' "
                f"(both standardize to '{draft.name}')",
                subject=full_name,
            )
        if existing.datatype != draft.datatype:
            raise SchemaError(
                f"conflicts with '{existing.first_seen}': type {draft.datatype} vs {existing.datatype}",
                subject=full_name,
            )
        if existing.target_source != draft.target_source:
            raise SchemaError(
                f"conflicts with '{existing.first_seen}': restrictCollection "
                f"{draft.target_source!r} vs {existing.target_source!r}",
                subject=full_name,
            )
        if existing.multi_valued != draft.multi_valued:
            warnings.append(SchemaWarning(
                full_name,
                f"multi differs from '{existing.first_seen}'; property widened to multi-valued",
            ))
            existing.multi_valued = True
            existing.unique = False
        if existing.unique != draft.unique:
            warnings.append(SchemaWarning(
                full_name,
                f"unique differs from '{existing.first_seen}'; unique relaxed to false",
            ))
            existing.unique = False
        existing.indexed = existing.indexed or draft.indexed
        if existing.doc is None:
            existing.doc = draft.doc

    def _resolve_targets(
        self,
        properties: Dict[str, _PropertyDraft],
        classes: Dict[str, _ClassDraft],
        warnings: List[SchemaWarning],
    ) -> Dict[str, Tuple[Optional[str], bool]]:
        """Map property name → (target class name, unresolved flag)."""
        targets: Dict[str, Tuple[Optional[str], bool]] = {}

        for name, draft in properties.items():
            if not draft.datatype.is_ref or not draft.target_source:
                targets[name] = (None, False)
                continue

            target = classes.get(draft.target_source)
            if target is not None:
                targets[name] = (target.name, False)
                continue

            if draft.target_source.startswith("_"):
                message = f"references system collection '{draft.target_source}', which is not migrated"
            elif self.strict:
                raise SchemaError(
                    f"restrictCollection '{draft.target_source}' is not a collection in the schema",
                    subject=draft.first_seen,
                )
            else:
                message = f"restrictCollection '{draft.target_source}' is not a collection in the schema"
            warnings.append(SchemaWarning(draft.first_seen, f"{message}; target left unresolved"))
            targets[name] = (None, True)

        return targets

    def _freeze(
        self,
        classes: Dict[str, _ClassDraft],
        properties: Dict[str, _PropertyDraft],
        targets: Dict[str, Tuple[Optional[str], bool]],
    ) -> SchemaModel:
        frozen_properties: Dict[str, PropertyDef] = {}
        for name, draft in properties.items():
            target_class, unresolved = targets[name]
            frozen_properties[name] = PropertyDef(
                name=name,
                source_name=draft.source_name,
                iri=self.resolver.property_iri(name),
                datatype=draft.datatype,
                multi_valued=draft.multi_valued,
                unique=draft.unique,
                indexed=draft.indexed,
                target_class=target_class,
                target_unresolved=unresolved,
                doc=draft.doc,
            )

        frozen_classes: Dict[str, ClassDef] = {}
        for draft in classes.values():
            frozen_classes[draft.name] = ClassDef(
                name=draft.name,
                source_name=draft.source_name,
                iri=self.resolver.class_iri(draft.name),
                properties=tuple(draft.properties),
                doc=draft.doc,
                source_id=draft.source_id,
            )

        return SchemaModel(classes=frozen_classes, properties=frozen_properties)


def build_schema_model(
    raw_schema: Mapping[str, Any],
    resolver: IRIResolver,
    strict: bool = True,
) -> Tuple[SchemaModel, List[SchemaWarning]]:
    """Convenience wrapper around SchemaModelBuilder.build."""
    return SchemaModelBuilder(resolver, strict=strict).build(raw_schema)

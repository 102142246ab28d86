"""
Coercion of raw v2 values to JSON-LD values.

Each v2 Datatype has one coercer. Coercers raise ValueError (or TypeError)
for values that cannot be represented in their datatype; the data
transformer turns those into MalformedValueWarning for the affected value
only.
"""

import json
import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping

from ...shared.models import Datatype
from .namespaces import rdf_datatype

JSONLD_JSON = "@json"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def instant_to_iso_string(epoch_ms: int) -> str:
    """
    Format a v2 instant (epoch milliseconds) as an ISO-8601 UTC timestamp.

    >>> instant_to_iso_string(1693403567000)
    '2023-08-30T13:52:47.000Z'

    Raises:
        ValueError: If the instant is not an integer or is outside the
            representable date range (years 1-9999).
    """
    try:
        moment = _EPOCH + timedelta(milliseconds=int(epoch_ms))
    except (OverflowError, OSError) as e:
        raise ValueError(f"instant {epoch_ms!r} is out of range") from e
    return _format_utc(moment)


def _format_utc(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _typed(value: Any, datatype: Datatype) -> Dict[str, Any]:
    return {"@value": value, "@type": rdf_datatype(datatype)}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ValueError(f"expected a string, got {type(value).__name__}")


def _tag(value: Any) -> str:
    # Expanded tag subjects carry their name in _tag/id ("person/status:active")
    if isinstance(value, Mapping):
        tag_id = value.get("_tag/id", value.get("id"))
        if isinstance(tag_id, str):
            return tag_id
        raise ValueError(f"tag reference without a tag id: {dict(value)!r}")
    return _string(value)


def _boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"expected a boolean, got {value!r}")


def _integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"expected an integer, got {value!r}")


def _float(value: Any) -> float:
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        number = float(value.strip())
    else:
        raise ValueError(f"expected a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"number must be finite, got {value!r}")
    return number


def _long(value: Any) -> Dict[str, Any]:
    return _typed(_integer(value), Datatype.LONG)


def _single_float(value: Any) -> Dict[str, Any]:
    return _typed(_float(value), Datatype.FLOAT)


def _bigdec(value: Any) -> Dict[str, Any]:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a decimal, got {value!r}")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"expected a decimal, got {value!r}")
    if not number.is_finite():
        raise ValueError(f"decimal must be finite, got {value!r}")
    return _typed(format(number, "f"), Datatype.BIGDEC)


def _parse_iso(value: str) -> str:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        moment = moment.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"timestamp {value!r} is out of range") from e
    return _format_utc(moment)


def _instant(value: Any) -> Dict[str, Any]:
    if _is_number(value):
        return _typed(instant_to_iso_string(value), Datatype.INSTANT)
    if isinstance(value, str):
        if value.strip().lstrip("-").isdigit():
            return _typed(instant_to_iso_string(value.strip()), Datatype.INSTANT)
        return _typed(_parse_iso(value), Datatype.INSTANT)
    raise ValueError(f"expected epoch milliseconds or an ISO timestamp, got {value!r}")


def _json(value: Any) -> Dict[str, Any]:
    if isinstance(value, str):
        value = json.loads(value)
    return {"@value": value, "@type": JSONLD_JSON}


def _geojson(value: Any) -> Dict[str, Any]:
    if isinstance(value, str):
        json.loads(value)
        return _typed(value, Datatype.GEOJSON)
    if isinstance(value, Mapping):
        return _typed(json.dumps(value, sort_keys=True, separators=(",", ":")), Datatype.GEOJSON)
    raise ValueError(f"expected a GeoJSON object, got {value!r}")


def _bytes(value: Any) -> Dict[str, Any]:
    text = _string(value).strip()
    if text.startswith("0x"):
        text = text[2:]
    bytes.fromhex(text)
    return _typed(text.upper(), Datatype.BYTES)


def _uri(value: Any) -> Dict[str, Any]:
    text = _string(value).strip()
    if not text:
        raise ValueError("empty URI")
    return _typed(text, Datatype.URI)


def _ref(value: Any) -> str:
    return ref_subject_id(value)


COERCERS: Dict[Datatype, Callable[[Any], Any]] = {
    Datatype.STRING: _string,
    Datatype.BOOLEAN: _boolean,
    Datatype.INT: _integer,
    Datatype.LONG: _long,
    Datatype.BIGINT: _integer,
    Datatype.FLOAT: _single_float,
    Datatype.DOUBLE: _float,
    Datatype.BIGDEC: _bigdec,
    Datatype.INSTANT: _instant,
    Datatype.REF: _ref,
    Datatype.TAG: _tag,
    Datatype.JSON: _json,
    Datatype.GEOJSON: _geojson,
    Datatype.BYTES: _bytes,
    Datatype.URI: _uri,
    Datatype.UUID: _string,
}


def coerce_value(value: Any, datatype: Datatype) -> Any:
    """
    Coerce one raw v2 value to its JSON-LD form.

    For ``ref`` the result is the referenced subject id; the caller turns it
    into an entity IRI.

    Raises:
        ValueError: If the value cannot be represented in the datatype.
        TypeError: If the value has an unusable Python type.
    """
    return COERCERS[datatype](value)


def ref_subject_id(value: Any) -> str:
    """
    Subject id referenced by a v2 ref value.

    Compact query results give refs as ``{"_id": 351843720888322}``; bare
    integer ids are accepted too.

    Raises:
        ValueError: If the value is not a subject reference.
    """
    if isinstance(value, Mapping):
        if value.get("_id") is None:
            raise ValueError(f"reference without _id: {dict(value)!r}")
        value = value["_id"]
    if isinstance(value, bool):
        raise ValueError(f"expected a subject reference, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip().isdigit():
        return value.strip()
    raise ValueError(f"expected a subject reference, got {value!r}")


def passthrough_value(value: Any, entity_iri: Callable[[str], str]) -> Any:
    """Best-effort JSON-LD form of a value whose predicate is not in the schema.

    Scalars pass through unchanged; ``{"_id": n}`` references become node
    references so they are not mistaken for embedded nodes.
    """
    if isinstance(value, list):
        return [passthrough_value(item, entity_iri) for item in value]
    if isinstance(value, Mapping) and "_id" in value:
        return {"@id": entity_iri(str(value["_id"]))}
    return value

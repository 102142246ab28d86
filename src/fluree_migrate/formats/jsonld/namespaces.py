"""
Ontology namespaces and datatype mappings.

Maps every v2 Datatype to the RDF datatype used for ``rdfs:range``,
``sh:datatype`` and typed literals. The tables are exhaustive over
``Datatype``; consumers index them directly.
"""

from typing import Dict, Iterable, Optional

from rdflib import Namespace, URIRef
from rdflib.namespace import OWL, RDF, RDFS, SH, XSD

from ...shared.models import Datatype

GEO = Namespace("http://www.opengis.net/ont/geosparql#")

# Prefixes emitted in @context blocks, in the order they are considered
PREFIXES: Dict[str, str] = {
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "owl": str(OWL),
    "xsd": str(XSD),
    "sh": str(SH),
    "geo": str(GEO),
}

TYPE_DISCRIMINATOR = str(RDF.type)

# v2 type → RDF datatype. REF has no literal datatype: it ranges over a class.
DATATYPE_TO_RDF: Dict[Datatype, Optional[URIRef]] = {
    Datatype.STRING: XSD.string,
    Datatype.BOOLEAN: XSD.boolean,
    Datatype.INT: XSD.integer,
    Datatype.LONG: XSD.long,
    Datatype.BIGINT: XSD.integer,
    Datatype.FLOAT: XSD.float,
    Datatype.DOUBLE: XSD.double,
    Datatype.BIGDEC: XSD.decimal,
    Datatype.INSTANT: XSD.dateTime,
    Datatype.REF: None,
    Datatype.TAG: XSD.string,
    Datatype.JSON: RDF.JSON,
    Datatype.GEOJSON: GEO.geoJSONLiteral,
    Datatype.BYTES: XSD.hexBinary,
    Datatype.URI: XSD.anyURI,
    Datatype.UUID: XSD.string,
}

# Datatypes whose values are lexical strings, eligible for sh:uniqueLang
STRING_LIKE: frozenset = frozenset({
    Datatype.STRING,
    Datatype.TAG,
    Datatype.UUID,
})


def curie(iri: str) -> str:
    """Compact a well-known IRI to ``prefix:local``; other IRIs are returned unchanged."""
    for prefix, namespace in PREFIXES.items():
        if iri.startswith(namespace) and len(iri) > len(namespace):
            return f"{prefix}:{iri[len(namespace):]}"
    return iri


def rdf_datatype(datatype: Datatype) -> Optional[str]:
    """Compact IRI of the RDF datatype for a v2 type, None for refs."""
    rdf_type = DATATYPE_TO_RDF[datatype]
    return curie(str(rdf_type)) if rdf_type is not None else None


def context_prefixes(names: Iterable[str]) -> Dict[str, str]:
    """@context entries for the given prefix names, in PREFIXES order."""
    wanted = set(names)
    return {name: iri for name, iri in PREFIXES.items() if name in wanted}

"""
v2 schema test fixtures.

Raw schemas in the shape returned by the source schema multi-query, after
normalization by FlureeSourceClient.fetch_schema().

Subject ids follow v2 numbering: a collection's ``_collection`` subject is
``(1 << 44) + n`` and its entities are ``(n << 44) + k``.
"""

SOURCE_URL = "http://localhost:8090/fdb/acme/crm"

PARTITION = 1 << 44

PERSON_COLLECTION_ID = PARTITION + 20
ACCOUNT_COLLECTION_ID = PARTITION + 21

ADA_ID = 20 * PARTITION + 1
BOB_ID = 20 * PARTITION + 2
ACCOUNT_ID = 21 * PARTITION + 1

# =============================================================================
# Person scenario: one collection, name (string) and friends (ref, multi)
# =============================================================================

PERSON_SCHEMA = {
    "collections": [
        {"_id": PARTITION + 0, "name": "_predicate"},
        {"_id": PARTITION + 5, "name": "_user"},
        {"_id": PERSON_COLLECTION_ID, "name": "person", "doc": "A person"},
    ],
    "predicates": [
        {"_id": 10, "name": "_user/username", "type": "string", "unique": True},
        {"_id": 1001, "name": "person/name", "type": "string"},
        {
            "_id": 1002,
            "name": "person/friends",
            "type": "ref",
            "multi": True,
            "restrictCollection": "person",
            "doc": "People this person knows",
        },
    ],
    "initial_predicates": [10],
}

# Raw multi-query response for PERSON_SCHEMA
PERSON_SCHEMA_RESPONSE = {
    "collections": PERSON_SCHEMA["collections"],
    "initial_predicates": [10],
    "current_predicates": PERSON_SCHEMA["predicates"],
}

# =============================================================================
# CRM schema: every datatype, a shared local name, refs in both directions
# =============================================================================

CRM_SCHEMA = {
    "collections": [
        {"_id": PERSON_COLLECTION_ID, "name": "person"},
        {"_id": ACCOUNT_COLLECTION_ID, "name": "bank_account", "doc": "A bank account"},
    ],
    "predicates": [
        {"_id": 2001, "name": "person/name", "type": "string"},
        {"_id": 2002, "name": "person/handle", "type": "string", "unique": True, "index": True},
        {"_id": 2003, "name": "person/age", "type": "int"},
        {"_id": 2004, "name": "person/visits", "type": "long"},
        {"_id": 2005, "name": "person/big_number", "type": "bigint"},
        {"_id": 2006, "name": "person/ratio", "type": "float"},
        {"_id": 2007, "name": "person/score", "type": "double"},
        {"_id": 2008, "name": "person/balance", "type": "bigdec"},
        {"_id": 2009, "name": "person/born", "type": "instant"},
        {"_id": 2010, "name": "person/active", "type": "boolean"},
        {"_id": 2011, "name": "person/tags", "type": "tag", "multi": True},
        {"_id": 2012, "name": "person/meta", "type": "json"},
        {"_id": 2013, "name": "person/location", "type": "geojson"},
        {"_id": 2014, "name": "person/avatar", "type": "bytes"},
        {"_id": 2015, "name": "person/homepage", "type": "uri"},
        {"_id": 2016, "name": "person/uid", "type": "uuid"},
        {
            "_id": 2017,
            "name": "person/accounts",
            "type": "ref",
            "multi": True,
            "restrictCollection": "bank_account",
        },
        {"_id": 2018, "name": "bank_account/name", "type": "string"},
        {"_id": 2019, "name": "bank_account/owner", "type": "ref", "restrictCollection": "person"},
    ],
    "initial_predicates": [],
}

ALL_DATATYPE_NAMES = [
    "string", "boolean", "int", "long", "bigint", "float", "double", "bigdec",
    "instant", "ref", "tag", "json", "geojson", "bytes", "uri", "uuid",
]


def schema_with(*predicates, collections=None, initial=None):
    """Build a raw schema from predicate records."""
    return {
        "collections": list(collections or []),
        "predicates": list(predicates),
        "initial_predicates": list(initial or []),
    }

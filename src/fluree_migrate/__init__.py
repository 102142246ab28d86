"""
Fluree v2 to v3 migration.

Reads a v2 ledger's collection/predicate schema and entity data and emits a
JSON-LD vocabulary (RDFS/OWL terms, optional SHACL shapes) and JSON-LD data
documents, to files, stdout or a v3 server.
"""

__version__ = "0.3.0"

"""
Output formats.

- jsonld: v2 schema and entity data to JSON-LD vocabulary and data documents
"""

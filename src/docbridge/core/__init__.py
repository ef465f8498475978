"""Core translation layer — codec, query builder and result materializer.

Nothing in this package talks to the store.
"""

from docbridge.core.codec import from_document, to_document, to_patch_document
from docbridge.core.materializer import decode_hits, hits_and_total
from docbridge.core.query import build_query, build_sort, parse_sort

__all__ = [
    "build_query",
    "build_sort",
    "decode_hits",
    "from_document",
    "hits_and_total",
    "parse_sort",
    "to_document",
    "to_patch_document",
]

# approxvi_jax/docs/__init__.py
"""
Documentation tooling: the static search index consumed by the docs site.
"""
from .search_index import (
    SearchRecord,
    SearchIndexError,
    load,
    loads,
    dump,
    dumps,
    validate,
    check,
    search,
    pages,
)
from .builder import (
    slugify,
    plaintext,
    records_from_markdown,
    records_from_docstrings,
    build_search_index,
    build_from_directory,
)

__all__ = [
    "SearchRecord",
    "SearchIndexError",
    "load",
    "loads",
    "dump",
    "dumps",
    "validate",
    "check",
    "search",
    "pages",
    "slugify",
    "plaintext",
    "records_from_markdown",
    "records_from_docstrings",
    "build_search_index",
    "build_from_directory",
]

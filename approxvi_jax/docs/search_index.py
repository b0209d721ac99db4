# approxvi_jax/docs/search_index.py
"""
Documentation search index.

The documentation build emits a static script binding one global to an
object with a `docs` field, an ordered list of records

    {"location": ..., "page": ..., "title": ..., "text": ..., "category": ...}

that the site's client-side search widget loads verbatim. This module reads,
writes, checks and queries that payload. Records are never reordered.
"""
from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

VARIABLE = "documenterSearchIndex"
PREFIX = f"var {VARIABLE} = "
FIELDS = ("location", "page", "title", "text", "category")
CATEGORIES = ("page", "section", "function", "type", "module", "macro", "constant")


class SearchIndexError(ValueError):
    """Malformed search index; `problems` lists every issue found."""

    def __init__(self, problems: Union[str, Sequence[str]]):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass(frozen=True)
class SearchRecord:
    """
    One searchable unit of the documentation.

    location: page path plus optional anchor, e.g. "examples/#Monitoring-ELBO".
              The empty string is the site root (the introduction page).
    page:     human-readable page name
    title:    heading the record belongs to
    text:     plain text; empty for section-header records
    category: "section", "page", "function", ...
    """
    location: str
    page: str
    title: str
    text: str
    category: str

    @classmethod
    def from_dict(cls, d: dict) -> SearchRecord:
        if not isinstance(d, dict):
            raise SearchIndexError(f"record must be an object, got {type(d).__name__}")
        missing = [f for f in FIELDS if f not in d]
        if missing:
            raise SearchIndexError(f"record is missing field(s): {', '.join(missing)}")
        return cls(**{f: d[f] for f in FIELDS})

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def anchor(self) -> str:
        _, _, anchor = self.location.partition("#")
        return anchor


# ---------------------------------------------------------------------
# Reading / writing
# ---------------------------------------------------------------------

def loads(source: str) -> List[SearchRecord]:
    """
    Parse the generated script (`var documenterSearchIndex = {...}`) or the
    bare JSON object.
    """
    payload = source.strip()
    if payload.startswith("var "):
        _, sep, payload = payload.partition("=")
        if not sep:
            raise SearchIndexError("expected `var <name> = {...}`")
        payload = payload.strip()
    if payload.endswith(";"):
        payload = payload[:-1]
    try:
        obj = json.loads(payload)
    except json.JSONDecodeError as e:
        raise SearchIndexError(f"invalid JSON: {e}") from e
    if not isinstance(obj, dict) or "docs" not in obj:
        raise SearchIndexError("index object has no `docs` field")
    if not isinstance(obj["docs"], list):
        raise SearchIndexError("`docs` must be a list of records")
    return [SearchRecord.from_dict(d) for d in obj["docs"]]


def load(path: Union[str, Path]) -> List[SearchRecord]:
    return loads(Path(path).read_text(encoding="utf-8"))


def dumps(records: Iterable[SearchRecord]) -> str:
    docs = json.dumps(
        [r.to_dict() for r in records], ensure_ascii=False, separators=(",", ":")
    )
    return f'{PREFIX}{{"docs":\n{docs}\n}}\n'


def dump(records: Iterable[SearchRecord], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(records), encoding="utf-8")
    return path


# ---------------------------------------------------------------------
# Structural checks
# ---------------------------------------------------------------------

def validate(records: Sequence[SearchRecord]) -> List[str]:
    """
    Return a list of problems (empty when the index is well formed).

    - page, title and category must be non-empty strings
    - location and text must be strings; text may be empty
    - category must be one of CATEGORIES
    """
    problems = []
    for i, r in enumerate(records):
        for field in FIELDS:
            value = getattr(r, field)
            if not isinstance(value, str):
                problems.append(f"record {i}: {field} must be a string, got {type(value).__name__}")
            elif field in ("page", "title", "category") and not value.strip():
                problems.append(f"record {i}: empty {field}")
            elif field == "category" and value not in CATEGORIES:
                problems.append(f"record {i}: unknown category {value!r}")
    return problems


def check(records: Sequence[SearchRecord]) -> None:
    problems = validate(records)
    if problems:
        raise SearchIndexError(problems)


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------

_TOKEN = re.compile(r"\w+")


def tokenize(text: str) -> List[str]:
    return _TOKEN.findall(text.lower())


def search(records: Sequence[SearchRecord], query: str, limit: int = 10) -> List[SearchRecord]:
    """
    Rank records by whole-word occurrences of the query terms; a hit in the
    title counts double. Ties keep index order.
    """
    terms = tokenize(query)
    if not terms or limit < 1:
        return []
    scored = []
    for i, r in enumerate(records):
        title = Counter(tokenize(r.title))
        text = Counter(tokenize(r.text))
        score = sum(2 * title[t] + text[t] for t in terms)
        if score > 0:
            scored.append((-score, i, r))
    scored.sort(key=lambda s: (s[0], s[1]))
    return [r for _, _, r in scored[:limit]]


def pages(records: Iterable[SearchRecord]) -> Dict[str, List[SearchRecord]]:
    """Group records by page, in order of first appearance."""
    out: Dict[str, List[SearchRecord]] = {}
    for r in records:
        out.setdefault(r.page, []).append(r)
    return out

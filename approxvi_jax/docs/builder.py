# approxvi_jax/docs/builder.py
"""
Build the documentation search index from Markdown sources and docstrings.

Records are emitted the way the documentation generator lays them out:

- every heading yields a "section" record, located at `<path>#<anchor>`,
  with empty text;
- every paragraph, code block, math block or admonition yields a "page"
  record located at `<path>`, titled with the page name;
- every documented object yields a "function" (or "type") record located
  at `<reference path>#<module>.<name>`.
"""
from __future__ import annotations

import inspect
import re
from pathlib import Path
from typing import Any, Iterable, List, Sequence, Tuple, Union

from .search_index import SearchRecord, check

_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE = re.compile(r"^(`{3,}|~{3,})\s*([\w+-]*)\s*$")
_ADMONITION = re.compile(r'^!!!\s+(\w+)(?:\s+"([^"]*)")?\s*$')
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_REF_LINK = re.compile(r"\[([^\]]+)\]\[[^\]]*\]")
_DISPLAY_MATH = re.compile(r"\$\$(.+?)\$\$", re.S)
_INLINE_MATH = re.compile(r"``(.+?)``|\$(?!\s)(.+?)(?<!\s)\$(?!\d)")
_MATH_DROP = str.maketrans("", "", "\\{}[]|,;")


def slugify(heading: str) -> str:
    """
    Anchor for a heading: decorations dropped, whitespace runs -> "-".

    >>> slugify("What's this package for?")
    "What's-this-package-for?"
    """
    kept = "".join(ch for ch in heading if ch.isalnum() or ch in " _-'?!.,:()")
    return "-".join(kept.split())


def math_plaintext(tex: str) -> str:
    return " ".join(tex.translate(_MATH_DROP).split())


def plaintext(markdown: str) -> str:
    """Strip Markdown and TeX markup from a single paragraph."""
    s = _DISPLAY_MATH.sub(lambda m: math_plaintext(m.group(1)), markdown)
    s = _INLINE_MATH.sub(lambda m: math_plaintext(m.group(1) or m.group(2)), s)
    s = _IMAGE.sub(lambda m: f"(Image: {m.group(1)})", s)
    s = s.replace("[^", "[")
    s = _LINK.sub(r"\1", s)
    s = _REF_LINK.sub(r"\1", s)
    s = s.replace("**", "").replace("`", "")
    s = re.sub(r"(?<!\w)\*(\S(?:.*?\S)?)\*(?!\w)", r"\1", s)
    return s.strip()


def _blocks(markdown: str):
    """
    Yield (kind, payload) with kind in {"heading", "code", "math",
    "admonition", "paragraph"}.
    """
    lines = markdown.splitlines()
    i, n = 0, len(lines)
    while i < n:
        line = lines[i]
        if not line.strip():
            i += 1
            continue

        m = _HEADING.match(line)
        if m:
            yield "heading", m.group(2)
            i += 1
            continue

        m = _FENCE.match(line)
        if m:
            fence, lang = m.group(1), m.group(2)
            body = []
            i += 1
            while i < n and not lines[i].startswith(fence):
                body.append(lines[i])
                i += 1
            i += 1  # closing fence
            yield ("math" if lang == "math" else "code"), "\n".join(body)
            continue

        m = _ADMONITION.match(line)
        if m:
            kind = m.group(1)
            title = m.group(2) or kind.capitalize()
            body = []
            i += 1
            while i < n and (lines[i].startswith("    ") or not lines[i].strip()):
                body.append(lines[i][4:])
                i += 1
            content = " ".join(" ".join(body).split())
            yield "admonition", f"{kind}: {title}\n{plaintext(content)}"
            continue

        para = []
        while i < n and lines[i].strip():
            if _HEADING.match(lines[i]) or _FENCE.match(lines[i]) or _ADMONITION.match(lines[i]):
                break
            para.append(lines[i])
            i += 1
        if any(_LIST_ITEM.match(p) for p in para):
            items = [_LIST_ITEM.sub("", p).strip() for p in para]
            yield "paragraph", "\n".join(plaintext(it) for it in items)
        else:
            yield "paragraph", plaintext(" ".join(p.strip() for p in para))


def records_from_markdown(path: str, page: str, markdown: str) -> List[SearchRecord]:
    """
    Records for one documentation page.

    path: location of the page, e.g. "examples/" ("" for the site root)
    page: page name shown in search results
    """
    records = []
    for kind, payload in _blocks(markdown):
        if kind == "heading":
            title = plaintext(payload)
            records.append(SearchRecord(
                location=f"{path}#{slugify(title)}",
                page=page,
                title=title,
                text="",
                category="section",
            ))
        elif kind == "math":
            records.append(SearchRecord(path, page, page, math_plaintext(payload), "page"))
        else:
            records.append(SearchRecord(path, page, page, payload, "page"))
    return records


def records_from_docstrings(
    path: str,
    objects: Iterable[Any],
    page: str = "Reference",
) -> List[SearchRecord]:
    """
    One record per documented object, titled "<module>.<name>".
    Objects without a docstring are skipped.
    """
    records = []
    for obj in objects:
        doc = inspect.getdoc(obj)
        if not doc:
            continue
        module = getattr(obj, "__module__", "") or ""
        root = module.split(".")[0]
        name = f"{root}.{obj.__qualname__}" if root else obj.__qualname__
        category = "type" if inspect.isclass(obj) else "function"
        records.append(SearchRecord(
            location=f"{path}#{name}",
            page=page,
            title=name,
            text=doc,
            category=category,
        ))
    return records


def build_search_index(
    pages: Sequence[Tuple[str, str, str]],
    docstrings: Iterable[Any] = (),
    reference_path: str = "reference/",
    reference_page: str = "Reference",
) -> List[SearchRecord]:
    """
    pages: (path, page name, markdown) triples, in site order.
    docstrings: objects documented on the reference page.

    The result always passes `check`.
    """
    records: List[SearchRecord] = []
    for path, page, markdown in pages:
        records.extend(records_from_markdown(path, page, markdown))
    records.extend(records_from_docstrings(reference_path, docstrings, page=reference_page))
    check(records)
    return records


def build_from_directory(
    src_dir: Union[str, Path],
    layout: Sequence[Tuple[str, str, str]],
    docstrings: Iterable[Any] = (),
) -> List[SearchRecord]:
    """
    layout: (markdown file name, path, page name) triples relative to src_dir.
    """
    src_dir = Path(src_dir)
    pages = [
        (path, page, (src_dir / fname).read_text(encoding="utf-8"))
        for fname, path, page in layout
    ]
    return build_search_index(pages, docstrings)

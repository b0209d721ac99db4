import json

import pytest

from approxvi_jax.docs import (
    SearchRecord,
    SearchIndexError,
    check,
    dump,
    dumps,
    load,
    loads,
    pages,
    search,
    validate,
)

GENERATED = (
    'var documenterSearchIndex = {"docs":\n'
    '[{"location":"technicaldescription/#Technical-background","page":"Technical description",'
    '"title":"Technical background","text":"","category":"section"},'
    '{"location":"technicaldescription/","page":"Technical description","title":"Technical description",'
    '"text":"In brief, the algorithm maximises the variational lower bound, typically known as the ELBO.",'
    '"category":"page"},'
    '{"location":"reference/#approxvi_jax.vi","page":"Reference","title":"approxvi_jax.vi",'
    '"text":"Returns approximate Gaussian posterior and log evidence.","category":"function"},'
    '{"location":"","page":"Introduction","title":"Introduction",'
    '"text":"This package approximates a posterior with a full-covariance Gaussian.","category":"page"}]\n'
    '}\n'
)


def test_loads_generated_script_keeps_order():
    records = loads(GENERATED)
    assert [r.category for r in records] == ["section", "page", "function", "page"]
    assert records[0].anchor == "Technical-background"
    assert records[0].text == ""
    assert records[3].location == ""
    assert validate(records) == []


def test_loads_bare_json_and_trailing_semicolon():
    obj = {"docs": [{"location": "a/", "page": "A", "title": "A", "text": "x", "category": "page"}]}
    assert loads(json.dumps(obj))[0].page == "A"
    assert loads("var index = " + json.dumps(obj) + ";")[0].title == "A"


def test_dumps_round_trips_and_matches_generated_layout(tmp_path):
    records = loads(GENERATED)
    text = dumps(records)
    assert text.startswith('var documenterSearchIndex = {"docs":\n[')
    assert loads(text) == records

    path = dump(records, tmp_path / "build" / "search_index.js")
    assert load(path) == records


def test_unicode_text_is_written_verbatim():
    r = SearchRecord("moreoptions/", "More options", "➤  Gradient free mode", "μ and σ²", "section")
    out = dumps([r])
    assert "➤" in out and "σ²" in out
    assert loads(out) == [r]


@pytest.mark.parametrize(
    "source",
    [
        "var documenterSearchIndex = {not json}",
        '{"pages": []}',
        '{"docs": {}}',
        '{"docs": [{"location": "a/", "page": "A"}]}',
        '{"docs": ["just a string"]}',
    ],
)
def test_malformed_payloads(source):
    with pytest.raises(SearchIndexError):
        loads(source)


def test_validate_reports_every_problem():
    records = [
        SearchRecord("a/", "", "A", "", "page"),
        SearchRecord("a/", "A", "  ", "text", ""),
        SearchRecord(None, "A", "A", 3, "page"),
        SearchRecord("a/#x", "A", "x", "", "section"),
    ]
    problems = validate(records)
    assert problems == [
        "record 0: empty page",
        "record 1: empty title",
        "record 1: empty category",
        "record 2: location must be a string, got NoneType",
        "record 2: text must be a string, got int",
    ]
    with pytest.raises(SearchIndexError) as exc:
        check(records)
    assert exc.value.problems == problems
    check(records[3:])


def test_search_ranks_title_hits_first():
    records = loads(GENERATED)
    hits = search(records, "technical")
    assert [h.title for h in hits] == ["Technical background", "Technical description"]

    hits = search(records, "Gaussian posterior")
    assert hits[0].title == "approxvi_jax.vi"
    assert hits[1].title == "Introduction"

    assert search(records, "") == []
    assert search(records, "nothing-matches-zzz") == []
    assert len(search(records, "the", limit=1)) == 1


def test_pages_groups_in_first_appearance_order():
    grouped = pages(loads(GENERATED))
    assert list(grouped) == ["Technical description", "Reference", "Introduction"]
    assert len(grouped["Technical description"]) == 2


def test_search_matches_whole_words_only():
    records = [
        SearchRecord("a/#Elbow-room", "A", "Elbow room", "", "section"),
        SearchRecord("a/#ELBO-maximisation", "A", "ELBO maximisation", "", "section"),
        SearchRecord("", "Intro", "Intro", "this text says nothing about s", "page"),
    ]
    assert [h.title for h in search(records, "elbo")] == ["ELBO maximisation"]
    assert [h.title for h in search(records, "S")] == ["Intro"]


def test_validate_flags_unknown_category():
    records = [SearchRecord("a/", "A", "A", "", "chapter")]
    assert validate(records) == ["record 0: unknown category 'chapter'"]

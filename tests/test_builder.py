from pathlib import Path

import pytest

import approxvi_jax
from approxvi_jax.docs import (
    SearchRecord,
    build_from_directory,
    build_search_index,
    check,
    loads,
    dumps,
    plaintext,
    records_from_docstrings,
    records_from_markdown,
    slugify,
)

DOCS_SRC = Path(__file__).resolve().parents[1] / "docs" / "src"

PAGE = '''# Technical background

In brief, the algorithm maximises the **ELBO** using the *reparametrisation trick*.

## ELBO maximisation

We approximate $p(\\theta|\\mathcal{D})$ with $q(\\theta) = \\mathcal{N}(\\theta|\\mu,\\Sigma)$.

```math
\\theta_s = \\mu + C z_s
```

```python
q, logev = vi(logp, x0, S=100)
```

!!! note
    Whenever option `Stest` is set, `test_every` must be set too.

- first item
- second [item](https://example.org)
'''


@pytest.mark.parametrize(
    "heading, anchor",
    [
        ("Technical background", "Technical-background"),
        ("What's this package for?", "What's-this-package-for?"),
        ("➤  Gradient free mode", "Gradient-free-mode"),
        ("Choosing the number of samples S", "Choosing-the-number-of-samples-S"),
    ],
)
def test_slugify(heading, anchor):
    assert slugify(heading) == anchor


def test_plaintext_strips_markup():
    assert plaintext(r"$\mathcal{N}(\theta|\mu,\Sigma)$") == "mathcalN(thetamuSigma)"
    assert plaintext("see [Technical background](technicaldescription.md)") == "see Technical background"
    assert plaintext("**bold** and *emph* and `code`") == "bold and emph and code"
    assert plaintext("a footnote[^1]") == "a footnote[1]"
    assert plaintext("![exampleproblem1](plot.png)") == "(Image: exampleproblem1)"
    assert plaintext("keeps test_every and x * y") == "keeps test_every and x * y"


def test_plaintext_keeps_currency_dollars():
    assert plaintext("costs $5 or $6, roughly") == "costs $5 or $6, roughly"
    assert plaintext("between $5,$6 each") == "between $5,$6 each"
    assert plaintext("with $x$ fixed") == "with x fixed"


def test_records_from_markdown_layout():
    records = records_from_markdown("technicaldescription/", "Technical description", PAGE)
    kinds = [(r.category, r.title) for r in records]
    assert kinds == [
        ("section", "Technical background"),
        ("page", "Technical description"),
        ("section", "ELBO maximisation"),
        ("page", "Technical description"),
        ("page", "Technical description"),
        ("page", "Technical description"),
        ("page", "Technical description"),
        ("page", "Technical description"),
    ]
    assert records[0].location == "technicaldescription/#Technical-background"
    assert records[0].text == ""
    assert records[1].location == "technicaldescription/"
    assert records[1].text == (
        "In brief, the algorithm maximises the ELBO using the reparametrisation trick."
    )
    assert records[3].text == "We approximate p(thetamathcalD) with q(theta) = mathcalN(thetamuSigma)."
    assert records[4].text == "theta_s = mu + C z_s"
    assert records[5].text == "q, logev = vi(logp, x0, S=100)"
    assert records[6].text == "note: Note\nWhenever option Stest is set, test_every must be set too."
    assert records[7].text == "first item\nsecond item"
    check(records)


def test_root_page_has_empty_location():
    records = records_from_markdown("", "Introduction", "# Basic use\n\nCall vi.\n")
    assert records[0].location == "#Basic-use"
    assert records[1].location == ""
    check(records)


def test_records_from_docstrings():
    def undocumented():
        pass

    records = records_from_docstrings(
        "reference/", [approxvi_jax.vi, approxvi_jax.GaussianPosterior, undocumented]
    )
    assert [r.title for r in records] == ["approxvi_jax.vi", "approxvi_jax.GaussianPosterior"]
    assert [r.category for r in records] == ["function", "type"]
    assert records[0].location == "reference/#approxvi_jax.vi"
    assert records[0].page == "Reference"
    assert "log-evidence" in records[0].text


def test_build_search_index_checks_result():
    records = build_search_index(
        [("", "Introduction", "# Intro\n\nHello."), ("examples/", "Examples", "# Monitoring ELBO\n")],
        docstrings=[approxvi_jax.example_problem_1],
    )
    assert [r.page for r in records] == ["Introduction", "Introduction", "Examples", "Reference"]
    assert loads(dumps(records)) == records

    with pytest.raises(ValueError):
        build_search_index([("a/", "", "# Title\n")])


def test_build_from_repository_docs():
    layout = [
        ("index.md", "", "Introduction"),
        ("technicaldescription.md", "technicaldescription/", "Technical description"),
        ("moreoptions.md", "moreoptions/", "More options"),
        ("examples.md", "examples/", "Examples"),
    ]
    records = build_from_directory(DOCS_SRC, layout, [approxvi_jax.vi])
    locations = {r.location for r in records}
    assert "technicaldescription/#Monitoring-ELBO-on-independent-test-set" in locations
    assert "moreoptions/#Gradient-free-mode" in locations
    assert "#What's-this-package-for?" in locations
    assert records[-1] == SearchRecord(
        location="reference/#approxvi_jax.vi",
        page="Reference",
        title="approxvi_jax.vi",
        text=records[-1].text,
        category="function",
    )

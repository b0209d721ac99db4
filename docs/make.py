#!/usr/bin/env python3
"""
Build docs/build/search_index.js from docs/src and the package docstrings.

    python docs/make.py
"""
from pathlib import Path

import approxvi_jax
from approxvi_jax.docs import build_from_directory, dump

HERE = Path(__file__).resolve().parent

LAYOUT = [
    ("index.md", "", "Introduction"),
    ("technicaldescription.md", "technicaldescription/", "Technical description"),
    ("moreoptions.md", "moreoptions/", "More options"),
    ("examples.md", "examples/", "Examples"),
    ("reference.md", "reference/", "Reference"),
]

DOCUMENTED = [
    approxvi_jax.vi,
    approxvi_jax.vi_diag,
    approxvi_jax.vi_run,
    approxvi_jax.example_problem_1,
    approxvi_jax.gaussian_problem,
    approxvi_jax.GaussianPosterior,
    approxvi_jax.FixedSampleVI,
]


def main():
    records = build_from_directory(HERE / "src", LAYOUT, DOCUMENTED)
    out = dump(records, HERE / "build" / "search_index.js")
    print(f"Wrote {len(records)} records to {out}")


if __name__ == "__main__":
    main()

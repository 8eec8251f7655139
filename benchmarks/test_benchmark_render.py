"""Template rendering benchmarks: stencil vs Jinja2.

Both engines render the same template sources from conftest.TEMPLATES with
the same contexts. Jinja2 compiles templates to Python bytecode while
stencil walks its AST, so these numbers show the cost of interpretation.

Template sizes:
- "minimal": Single variable
- "small": Loop over 10 dict items with a filter
- "medium": Conditional, nested object, loop with several filters
- "page": Two-level inheritance with an imported macro called 50 times

Run with: pytest benchmarks/test_benchmark_render.py --benchmark-only
"""

from __future__ import annotations

import pytest
from jinja2 import Environment as Jinja2Environment
from pytest_benchmark.fixture import BenchmarkFixture

from stencil import Environment as StencilEnvironment


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_stencil(
    benchmark: BenchmarkFixture, stencil_env: StencilEnvironment
) -> None:
    benchmark(stencil_env.render, "minimal.html", name="Benchmark")


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_jinja2(benchmark: BenchmarkFixture, jinja2_env: Jinja2Environment) -> None:
    template = jinja2_env.get_template("minimal.html")
    benchmark(template.render, name="Benchmark")


@pytest.mark.benchmark(group="render:small")
def test_render_small_stencil(
    benchmark: BenchmarkFixture,
    stencil_env: StencilEnvironment,
    small_context: dict[str, object],
) -> None:
    benchmark(stencil_env.render, "small.html", small_context)


@pytest.mark.benchmark(group="render:small")
def test_render_small_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    small_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("small.html")
    benchmark(template.render, **small_context)


@pytest.mark.benchmark(group="render:medium")
def test_render_medium_stencil(
    benchmark: BenchmarkFixture,
    stencil_env: StencilEnvironment,
    medium_context: dict[str, object],
) -> None:
    benchmark(stencil_env.render, "medium.html", medium_context)


@pytest.mark.benchmark(group="render:medium")
def test_render_medium_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    medium_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("medium.html")
    benchmark(template.render, **medium_context)


@pytest.mark.benchmark(group="render:page")
def test_render_page_stencil(
    benchmark: BenchmarkFixture,
    stencil_env: StencilEnvironment,
    page_context: dict[str, object],
) -> None:
    benchmark(stencil_env.render, "page.html", page_context)


@pytest.mark.benchmark(group="render:page")
def test_render_page_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    page_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("page.html")
    benchmark(template.render, **page_context)


def test_outputs_match(
    stencil_env: StencilEnvironment,
    jinja2_env: Jinja2Environment,
    medium_context: dict[str, object],
    page_context: dict[str, object],
) -> None:
    """Guard: the benchmarked work is the same in both engines."""
    for name, context in (("medium.html", medium_context), ("page.html", page_context)):
        ours = stencil_env.render(name, context)
        theirs = jinja2_env.get_template(name).render(context)
        assert " ".join(ours.split()) == " ".join(theirs.split())

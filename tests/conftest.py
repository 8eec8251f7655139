"""Pytest configuration and fixtures for Stencil tests."""

import pytest

from stencil import Environment


@pytest.fixture
def env():
    """Create a basic Stencil Environment."""
    return Environment()


@pytest.fixture
def env_autoescape():
    """Create a Stencil Environment with autoescape enabled."""
    return Environment(autoescape=True)


@pytest.fixture
def env_trim():
    """Create a Stencil Environment with trim_blocks and lstrip_blocks enabled."""
    return Environment(trim_blocks=True, lstrip_blocks=True)


@pytest.fixture
def env_strict():
    """Create a Stencil Environment that raises on undefined values."""
    return Environment(undefined="strict")


@pytest.fixture
def env_with_templates():
    """Create a Stencil Environment with a small set of registered templates."""
    env = Environment()
    env.register_template(
        "base.html",
        "<html>"
        "<head>{% block head %}{% endblock %}</head>"
        "<body>{% block body %}{% endblock %}</body>"
        "</html>",
    )
    env.register_template(
        "child.html", '{% extends "base.html" %}{% block body %}Hello World{% endblock %}'
    )
    env.register_template("partial.html", "<p>Partial content</p>")
    env.register_template(
        "macros.html",
        "{% macro greet(name) %}Hello {{ name }}{% endmacro %}"
        "{% macro add(a, b) %}{{ a + b }}{% endmacro %}",
    )
    return env


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )

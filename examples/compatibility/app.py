"""Compatibility cases -- the fixture set rendered through stencil.

Each case is a set of in-memory template sources, the name of the entry
template and a context. ``render_case`` registers the sources in a fresh
Environment and renders the entry, the way a command-line harness would
for one case id before printing or diffing the result.

Run:
    python app.py            # every case
    python app.py case7      # one case
"""

import sys
from dataclasses import dataclass, field
from typing import Any

from stencil import Environment


@dataclass(frozen=True)
class User:
    name: str
    age: int


@dataclass(frozen=True)
class Case:
    """One fixture: sources keyed by name, the entry to render, and its context."""

    templates: dict[str, str]
    context: dict[str, Any] = field(default_factory=dict)
    entry: str = "template.txt"


CASES: dict[str, Case] = {
    # Variable interpolation
    "case0": Case({"template.txt": "Hello {{ name }}!"}, {"name": "Ririko"}),
    # Inheritance
    "case1": Case(
        {
            "base.txt": "<header>{% block header %}Default header{% endblock %}</header>\n"
            "<main>{% block content %}{% endblock %}</main>",
            "template.txt": '{% extends "base.txt" %}'
            "{% block header %}Welcome{% endblock %}"
            "{% block content %}Hello {{ name }}!{% endblock %}",
        },
        {"name": "Ririko"},
    ),
    # For loop
    "case2": Case(
        {"template.txt": "{% for item in items %}- {{ item }}\n{% endfor %}"},
        {"items": ["apple", "banana", "cherry"]},
    ),
    # If/else
    "case3": Case(
        {"template.txt": "{% if show %}Hello {{ name }}!{% else %}Hidden{% endif %}"},
        {"show": True, "name": "Ririko"},
    ),
    # Filters
    "case4": Case(
        {"template.txt": "{{ name | upper }} {{ name | lower }} {{ name | length }} {{ name | reverse }}"},
        {"name": "Ririko"},
    ),
    # Range function
    "case5": Case(
        {"template.txt": "{% for i in range(5) %}{{ i }}{% if not loop.last %}, {% endif %}{% endfor %}"},
        {"name": "Ririko"},
    ),
    # Set statement
    "case6": Case(
        {"template.txt": '{% set greeting = "Hello" %}{% set full = greeting ~ ", " ~ name %}{{ full }}!'},
        {"name": "Ririko"},
    ),
    # Object access
    "case7": Case(
        {"template.txt": "Name: {{ user.name }}, Age: {{ user.age }}, Next: {{ user.age + 1 }}"},
        {"user": User(name="Ririko", age=25)},
    ),
    # Loop variables
    "case8": Case(
        {
            "template.txt": "{% for item in items %}"
            "{{ loop.index }}/{{ loop.length }} {{ item }}"
            "{% if loop.first %} (first){% endif %}{% if loop.last %} (last){% endif %}\n"
            "{% endfor %}"
        },
        {"items": ["apple", "banana", "cherry"]},
    ),
    # Default filter
    "case9": Case(
        {"template.txt": '{{ value | default("N/A") }} {{ missing | default("N/A") }}'},
        {"value": "Hello"},
    ),
    # Macro
    "case10": Case(
        {
            "template.txt": '{% macro greet(who, punctuation="!") %}Hello {{ who }}{{ punctuation }}{% endmacro %}'
            '{{ greet(name) }} {{ greet("again", punctuation="?") }}'
        },
        {"name": "Ririko"},
    ),
    # Nested loops
    "case11": Case(
        {"template.txt": "{% for row in matrix %}{{ row | join(' ') }}{% if not loop.last %}\n{% endif %}{% endfor %}"},
        {"matrix": [[1, 2, 3], [4, 5, 6], [7, 8, 9]]},
    ),
}


def render_case(case_id: str) -> str:
    """Render one fixture in a fresh Environment.

    Raises:
        KeyError: Unknown case id
        RenderError: The template failed to render
    """
    case = CASES[case_id]
    env = Environment()
    for name, source in case.templates.items():
        env.register_template(name, source)
    return env.render(case.entry, case.context)


outputs = {case_id: render_case(case_id) for case_id in CASES}


def main() -> None:
    selected = sys.argv[1:] or list(CASES)
    for case_id in selected:
        print(f"== {case_id}")
        print(outputs[case_id])


if __name__ == "__main__":
    main()

from __future__ import annotations

import pytest
from jinja2 import DictLoader
from jinja2 import Environment as Jinja2Environment

from stencil import Environment as StencilEnvironment

# Identical sources for both engines.
TEMPLATES = {
    "minimal.html": "Hello {{ name }}!",
    "small.html": """\
{% for item in items %}
  <li>{{ item.name | upper }}</li>
{% endfor %}
""",
    "medium.html": """\
{% if user %}
  <div class="profile">
    <h1>{{ user.name | title }}</h1>
    <p>{{ user.bio | default("No bio") }}</p>
    {% for post in user.posts %}
      <article class="{{ loop.cycle('odd', 'even') }}">
        <h2>{{ post.title | truncate(30) }}</h2>
        <p>{{ post.tags | join(", ") }}</p>
      </article>
    {% endfor %}
  </div>
{% else %}
  <p>Please log in.</p>
{% endif %}
""",
    "base.html": """\
<html><head><title>{% block title %}Site{% endblock %}</title></head>
<body>{% block body %}{% endblock %}</body></html>
""",
    "macros.html": """\
{% macro card(title, body) %}<div class="card"><h3>{{ title }}</h3>{{ body }}</div>{% endmacro %}
""",
    "page.html": """\
{% extends "base.html" %}
{% from "macros.html" import card %}
{% block title %}{{ page_title }} - {{ super() }}{% endblock %}
{% block body %}
{% for entry in entries %}{{ card(entry.title, entry.body) }}{% endfor %}
{% endblock %}
""",
}


@pytest.fixture(scope="session")
def stencil_env() -> StencilEnvironment:
    env = StencilEnvironment(autoescape=True)
    for name, source in TEMPLATES.items():
        env.register_template(name, source)
    return env


@pytest.fixture(scope="session")
def jinja2_env() -> Jinja2Environment:
    return Jinja2Environment(loader=DictLoader(TEMPLATES), autoescape=True)


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return {"items": [{"name": f"item {i}"} for i in range(10)]}


@pytest.fixture(scope="session")
def medium_context() -> dict[str, object]:
    return {
        "user": {
            "name": "ada lovelace",
            "bio": "Analyst & <engine> enthusiast",
            "posts": [
                {"title": f"Notes on the engine, part {i}", "tags": ["math", "history"]}
                for i in range(5)
            ],
        }
    }


@pytest.fixture(scope="session")
def page_context() -> dict[str, object]:
    return {
        "page_title": "Catalogue",
        "entries": [{"title": f"Entry {i}", "body": "<b>body</b>"} for i in range(50)],
    }

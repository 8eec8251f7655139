"""Jinja2 compatibility -- the same templates rendered by stencil and Jinja2.

Registers one set of template sources in both engines and renders them
with the same context. Inheritance, macros, includes, loops and the
common filters behave the same way, so the outputs match.

Run:
    python app.py
"""

from jinja2 import DictLoader
from jinja2 import Environment as Jinja2Environment

from stencil import Environment as StencilEnvironment

TEMPLATES = {
    "layout.html": """\
<html>
<head><title>{% block title %}Site{% endblock %}</title></head>
<body>
{% block content %}{% endblock %}
{% include "footer.html" %}
</body>
</html>
""",
    "footer.html": "<footer>{{ site | upper }} &middot; {{ year }}</footer>",
    "macros.html": """\
{% macro badge(label, kind="info") -%}
<span class="badge {{ kind }}">{{ label }}</span>
{%- endmacro %}
""",
    "orders.html": """\
{% extends "layout.html" %}
{% import "macros.html" as ui %}
{% block title %}Orders - {{ super() }}{% endblock %}
{% block content %}
<h1>{{ customer.name | title }}</h1>
<ul>
{% for order in orders %}
  <li class="{{ loop.cycle('odd', 'even') }}">
    #{{ loop.index }} {{ order.item }} x{{ order.qty }}
    {{ ui.badge(order.status, kind="ok" if order.status == "shipped" else "warn") }}
  </li>
{% else %}
  <li>No orders</li>
{% endfor %}
</ul>
{% set total = orders | sum(attribute="qty") %}
<p>{{ total }} item{{ "s" if total != 1 }} | tags: {{ customer.tags | join(", ") }}</p>
<p>Note: {{ customer.note | default("none given") }}</p>
{% endblock %}
""",
}

CONTEXT = {
    "site": "example shop",
    "year": 2024,
    "customer": {"name": "ada lovelace", "tags": ["vip", "early"]},
    "orders": [
        {"item": "Gear", "qty": 2, "status": "shipped"},
        {"item": "Lever", "qty": 1, "status": "pending"},
        {"item": "Cog", "qty": 4, "status": "shipped"},
    ],
}

stencil_env = StencilEnvironment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
for name, source in TEMPLATES.items():
    stencil_env.register_template(name, source)

jinja2_env = Jinja2Environment(
    loader=DictLoader(TEMPLATES), autoescape=True, trim_blocks=True, lstrip_blocks=True
)

stencil_output = stencil_env.render("orders.html", CONTEXT)
jinja2_output = jinja2_env.get_template("orders.html").render(CONTEXT)

empty_context = {**CONTEXT, "orders": []}
stencil_output_empty = stencil_env.render("orders.html", empty_context)
jinja2_output_empty = jinja2_env.get_template("orders.html").render(empty_context)


def main() -> None:
    print("=== stencil ===")
    print(stencil_output)
    print("=== jinja2 ===")
    print(jinja2_output)
    print("identical:", stencil_output == jinja2_output)


if __name__ == "__main__":
    main()

"""Template inheritance -- a three-level extends chain with super().

``base.html`` defines the page skeleton, ``section.html`` fills in the
navigation and ``article.html`` supplies the content while keeping the
parent's title through ``super()``.

Run:
    python app.py
"""

from stencil import Environment

env = Environment(trim_blocks=True, lstrip_blocks=True)

env.register_template(
    "base.html",
    """\
<title>{% block title %}My Site{% endblock %}</title>
<nav>{% block nav %}home{% endblock %}</nav>
<main>{% block content required %}{% endblock %}</main>
""",
)
env.register_template(
    "section.html",
    """\
{% extends "base.html" %}
{% set section = "Docs" %}
{% block nav %}{{ super() }} / {{ section | lower }}{% endblock %}
""",
)
env.register_template(
    "article.html",
    """\
{% extends "section.html" %}
{% block title %}{{ article.title }} | {{ super() }}{% endblock %}
{% block content %}
{% for paragraph in article.body %}
<p>{{ paragraph }}</p>
{% endfor %}
{% endblock %}
""",
)

article = {"title": "Getting Started", "body": ["Install it.", "Render something."]}
output = env.render("article.html", article=article)
chain = [template.name for template in env.resolve("article.html").chain]


def main() -> None:
    print(" -> ".join(chain))
    print(output)


if __name__ == "__main__":
    main()

"""Error reporting -- codes, source snippets and the include stack.

A typo three templates deep in a strict environment produces a
``RenderError`` that names the innermost template and line, shows the
offending source and lists the includes that led there.

Run:
    python app.py
"""

from stencil import Environment, RenderError

env = Environment(undefined="strict")

env.register_template(
    "page.html",
    """\
<html>
{% include "layout.html" %}
</html>""",
)
env.register_template(
    "layout.html",
    """\
<body>
  {% include "nav.html" %}
  <main>{{ content }}</main>
</body>""",
)
env.register_template(
    "nav.html",
    """\
<nav>
  <a href="/">Home</a>
  <span>Welcome, {{ usernme }}</span>
</nav>""",
)

try:
    env.render("page.html", username="ada", content="hi")
except RenderError as exc:
    error = exc
else:
    raise SystemExit("expected a RenderError")


def main() -> None:
    print(error)
    print()
    print(error.format_compact())


if __name__ == "__main__":
    main()

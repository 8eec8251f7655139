"""Hello World -- the simplest stencil example.

Compile a template from a string and render it with context variables.
Nothing needs to be registered first.

Run:
    python app.py
"""

from stencil import Environment

env = Environment()

# Compile from string
template = env.from_string("Hello, {{ name }}!")

# Render with context
output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    # Multiple renders with different context
    for name in ["Stencil", "Jinja", "Python"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()

"""Custom filters and tests -- extending stencil with register_filter and register_test.

Demonstrates register_filter(), the @env.filter() decorator, and
register_test() for building domain-specific template helpers.

Run:
    python app.py
"""

from stencil import Environment

env = Environment(trim_blocks=True, lstrip_blocks=True)


# Custom filter: register_filter()
def money(amount: float, currency: str = "$") -> str:
    """Format amount as currency."""
    return f"{currency}{amount:,.2f}"


env.register_filter("money", money)


# Custom filter: @env.filter() decorator
@env.filter()
def pluralize(n: int, singular: str, plural: str) -> str:
    """Return singular or plural form based on count."""
    return singular if n == 1 else plural


# Custom test: register_test()
def is_prime(n: int) -> bool:
    """Test if integer is prime."""
    if n < 2:
        return False
    return all(n % i != 0 for i in range(2, int(n**0.5) + 1))


env.register_test("prime", is_prime)

env.register_template(
    "invoice.txt",
    """\
Invoice: {{ item_count }} {{ item_count | pluralize("item", "items") }}
{% for item in items %}
  {{ item.name }}: {{ (item.price * item.qty) | money }}
{% endfor %}
Total: {{ total | money }} ({{ total | money("€") }})
{% if item_count is prime %}
Item count is prime
{% endif %}
""",
)

output = env.render(
    "invoice.txt",
    total=1234.56,
    item_count=3,
    items=[
        {"name": "Widget A", "price": 19.99, "qty": 2},
        {"name": "Widget B", "price": 5.00, "qty": 1},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()

"""Tests for the compatibility example: every fixture's exact output."""

import pytest

EXPECTED = {
    "case0": "Hello Ririko!",
    "case1": "<header>Welcome</header>\n<main>Hello Ririko!</main>",
    "case2": "- apple\n- banana\n- cherry\n",
    "case3": "Hello Ririko!",
    "case4": "RIRIKO ririko 6 okiriR",
    "case5": "0, 1, 2, 3, 4",
    "case6": "Hello, Ririko!",
    "case7": "Name: Ririko, Age: 25, Next: 26",
    "case8": "1/3 apple (first)\n2/3 banana\n3/3 cherry (last)\n",
    "case9": "Hello N/A",
    "case10": "Hello Ririko! Hello again?",
    "case11": "1 2 3\n4 5 6\n7 8 9",
}


class TestCompatibilityApp:
    """Verify every fixture renders exactly."""

    @pytest.mark.parametrize("case_id", sorted(EXPECTED))
    def test_case_output(self, example_app, case_id: str) -> None:
        assert example_app.outputs[case_id] == EXPECTED[case_id]

    def test_every_case_covered(self, example_app) -> None:
        assert set(example_app.CASES) == set(EXPECTED)

    def test_render_is_repeatable(self, example_app) -> None:
        assert example_app.render_case("case8") == example_app.render_case("case8")

    def test_unknown_case(self, example_app) -> None:
        with pytest.raises(KeyError):
            example_app.render_case("case99")

    def test_main_selects_cases(self, example_stdout) -> None:
        assert example_stdout("case0", "case3") == "== case0\nHello Ririko!\n== case3\nHello Ririko!\n"

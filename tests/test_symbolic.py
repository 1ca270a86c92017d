import math

from moondec.analysis.symbolic import NumericProxy, format_number


def test_format_number_prefers_integral_text() -> None:
    assert format_number(3.0) == "3"
    assert format_number(3.5) == "3.5"
    assert format_number(-2.0) == "-2"
    assert format_number(math.inf) == "math.huge"
    assert format_number(math.nan) == "(0/0)"


def test_known_operands_fold() -> None:
    two = NumericProxy.known(2)
    three = NumericProxy.known(3)
    assert (two + three).text == "5"
    assert (three - two).text == "1"
    assert (two * three).value == 6.0
    assert (two ** three).text == "8"
    assert (NumericProxy.known(7) % 3).text == "1"
    assert (-two).text == "-2"


def test_lua_modulo_follows_floor_semantics() -> None:
    assert (NumericProxy.known(-7) % 3).text == "2"


def test_division_and_modulo_by_zero_fold_to_zero() -> None:
    ten = NumericProxy.known(10)
    assert (ten / 0).text == "0"
    assert (ten % 0).text == "0"
    assert (ten / 0).is_known


def test_unknown_operand_produces_expression() -> None:
    health = NumericProxy.symbol("Humanoid.Health")
    assert (health - 10).text == "Humanoid.Health - 10"
    assert (5 - health).text == "5 - Humanoid.Health"
    assert ((health + 1) * 2).text == "(Humanoid.Health + 1) * 2"
    assert not (health * 2).is_known


def test_overflow_degrades_to_text() -> None:
    result = NumericProxy.known(10) ** 400
    assert not result.is_known
    assert result.text == "10 ^ 400"


def test_comparisons() -> None:
    assert NumericProxy.known(1).lt(2).value is True
    assert NumericProxy.known(2).le(1).text == "false"
    assert NumericProxy.known(2).eq(2).value is True
    assert NumericProxy.symbol("x").eq(1).text == "x == 1"

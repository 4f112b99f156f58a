import pytest

from money import ZERO, Money, sum_money, to_literal


@pytest.mark.parametrize(
    ("literal", "cents"),
    [
        ("100kCr", 10_000_000),
        ("1kCr", 100_000),
        ("10MCr", 1_000_000_000),
        ("2.5 Cr", 250),
        ("1.5 MCr", 150_000_000),
        ("40", 4_000),
        ("0.01Cr", 1),
        ("1GCr", 100_000_000_000),
    ],
)
def test_parse_money_literals(literal: str, cents: int) -> None:
    assert Money.parse(literal).cents == cents


def test_parse_accepts_numbers_and_money() -> None:
    assert Money.parse(3) == Money.credits(3) == Money(300)
    assert Money.parse(0.5) == Money(50)
    already = Money(42)
    assert Money.parse(already) is already


@pytest.mark.parametrize("literal", ["", "Cr", "abc", "1xCr", "k", "nanCr"])
def test_parse_rejects_garbage(literal: str) -> None:
    with pytest.raises(ValueError):
        Money.parse(literal)


def test_parse_rejects_booleans() -> None:
    with pytest.raises(ValueError):
        Money.parse(True)


def test_compact_display() -> None:
    assert str(Money.parse("1500Cr")) == "1.5kCr"
    assert str(Money.parse("250Cr")) == "250Cr"
    assert str(Money(1)) == "0.01Cr"
    assert str(Money.parse("10MCr")) == "10MCr"
    assert str(-Money.parse("2kCr")) == "-2kCr"


def test_exact_literal_round_trips_through_parse() -> None:
    amount = Money(123_456)
    assert to_literal(amount) == "1234.56Cr"
    assert Money.parse(to_literal(amount)) == amount
    assert to_literal(Money(10_000)) == "100Cr"


def test_arithmetic() -> None:
    assert Money(100) + Money(50) == Money(150)
    assert Money(100) - Money(150) == Money(-50)
    assert Money(1_000) * 0.5 == Money(500)
    assert Money(7) * 3 == Money(21)
    assert Money(7) // 2 == Money(3)
    assert sum([Money(1), Money(2), Money(3)]) == Money(6)
    assert sum_money([]) == ZERO


def test_scaling_rounds_to_whole_cents_half_to_even() -> None:
    assert Money(3) * 0.5 == Money(2)
    assert Money(5) * 0.5 == Money(2)


def test_ordering_and_truthiness() -> None:
    assert Money(1) < Money(2)
    assert max(Money(5), Money(3)) == Money(5)
    assert not ZERO
    assert Money(1)

import pytest

from errors import InsufficientFunds, MoneyConservationViolation, UnknownAccount
from ledger import Ledger
from money import ZERO, Money


def make_ledger() -> Ledger:
    ledger = Ledger(journal_size=10)
    ledger.open_account("alice", Money.parse("100Cr"))
    ledger.open_account("bob", Money.parse("50Cr"))
    ledger.open_account("treasury")
    return ledger


def test_transfer_moves_money_and_conserves_total() -> None:
    ledger = make_ledger()

    transfer = ledger.transfer("alice", "bob", Money.parse("40Cr"), "trade", day=3)

    assert ledger.balance("alice") == Money.parse("60Cr")
    assert ledger.balance("bob") == Money.parse("90Cr")
    assert ledger.total() == ledger.money_supply == Money.parse("150Cr")
    assert transfer.kind == "trade"
    assert transfer.day == 3
    assert ledger.recent_transfers() == [transfer]


def test_insufficient_funds_leaves_balances_untouched() -> None:
    ledger = make_ledger()

    with pytest.raises(InsufficientFunds) as exc_info:
        ledger.transfer("bob", "alice", Money.parse("50.01Cr"), "trade", day=0)

    assert exc_info.value.account_id == "bob"
    assert ledger.balance("bob") == Money.parse("50Cr")
    assert ledger.balance("alice") == Money.parse("100Cr")
    assert not ledger.journal


def test_whole_balance_can_be_spent() -> None:
    ledger = make_ledger()

    ledger.transfer("bob", "treasury", Money.parse("50Cr"), "tax", day=0)

    assert ledger.balance("bob") == ZERO
    assert ledger.can_pay("treasury", Money.parse("50Cr"))


def test_unknown_accounts_and_negative_amounts_are_rejected() -> None:
    ledger = make_ledger()

    with pytest.raises(UnknownAccount):
        ledger.transfer("alice", "carol", Money(1), "trade", day=0)
    with pytest.raises(UnknownAccount):
        ledger.balance("carol")
    with pytest.raises(ValueError):
        ledger.transfer("alice", "bob", Money(-1), "trade", day=0)


def test_accounts_are_opened_once_and_never_negative() -> None:
    ledger = make_ledger()

    with pytest.raises(ValueError):
        ledger.open_account("alice")
    with pytest.raises(ValueError):
        ledger.open_account("dave", Money(-5))


def test_journal_is_bounded() -> None:
    ledger = Ledger(journal_size=2)
    ledger.open_account("a", Money(100))
    ledger.open_account("b")

    for day in range(3):
        ledger.transfer("a", "b", Money(1), "salary", day=day)

    assert [t.day for t in ledger.journal] == [1, 2]


def test_conservation_violation_is_an_assertion_error() -> None:
    ledger = make_ledger()
    ledger._balances["alice"] = Money.parse("1kCr")

    with pytest.raises(MoneyConservationViolation):
        ledger.verify_conservation()
    assert issubclass(MoneyConservationViolation, AssertionError)


def test_accounts_are_listed_sorted() -> None:
    ledger = make_ledger()

    assert [account for account, _ in ledger.accounts()] == ["alice", "bob", "treasury"]

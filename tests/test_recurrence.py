from amounts import Breakdown, Flat
from domain import Direction, MonthlyData, Recurring, RecurringTransfer, Transfer
from recurrence import apply_recurrings, recurring_statistics


def _items() -> list[Recurring]:
    return [
        Recurring("r1", "Salary", Direction.income, "salary", Flat(300_000)),
        Recurring(
            "r2",
            "Rent and power",
            Direction.expense,
            "housing",
            Breakdown({"rent": 80_000, "utilities": 10_000}),
        ),
        Recurring("r3", "Gym", Direction.expense, "health", Flat(8_000), enabled=False),
        Recurring("r4", "Groceries", Direction.expense, "food", Flat(30_000)),
    ]


def _transfers() -> list[RecurringTransfer]:
    return [
        RecurringTransfer("t1", "NISA", "account", "nisa", 30_000),
        RecurringTransfer("t2", "Old", "account", "pool", 1_000, enabled=False),
    ]


def test_apply_overwrites_entries_and_appends_transfers():
    data = MonthlyData(
        month="2024-05",
        income={"salary": Flat(1)},
        expense={"food": Flat(45_000), "misc": Flat(2_000)},
    )

    applied = apply_recurrings(data, _items(), _transfers())

    assert applied.income == {"salary": Flat(300_000)}
    assert applied.expense["food"] == Flat(30_000)
    assert applied.expense["misc"] == Flat(2_000)
    assert "health" not in applied.expense
    assert applied.transfers == (Transfer("account", "nisa", 30_000, "NISA"),)
    assert data.expense["food"] == Flat(45_000)


def test_reapplying_is_idempotent_for_entries_but_not_transfers():
    once = apply_recurrings(MonthlyData.empty("2024-05"), _items(), _transfers())
    twice = apply_recurrings(once, _items(), _transfers())

    assert twice.income == once.income
    assert twice.expense == once.expense
    assert len(twice.transfers) == 2


def test_transfer_note_takes_precedence_over_name():
    transfer = RecurringTransfer("t", "Name", "account", "save", 100, note="Custom")
    applied = apply_recurrings(MonthlyData.empty("2024-01"), [], [transfer])
    assert applied.transfers[0].note == "Custom"


def test_recurring_statistics():
    stats = recurring_statistics(
        _items(), {"salary": "Salary", "housing": "Housing", "food": "Food"}
    )

    assert stats["total_monthly_income"] == 300_000
    assert stats["total_monthly_expenses"] == 120_000
    assert stats["net_monthly"] == 180_000
    assert stats["counts"] == {"income": 1, "expense": 2, "total": 3}
    assert [row["name"] for row in stats["expense_breakdown"]] == ["Housing", "Food"]
    assert stats["expense_breakdown"][0]["percent"] == 75
    assert stats["income_breakdown"] == [
        {"name": "Salary", "amount": 300_000, "percent": 100}
    ]


def test_statistics_with_nothing_enabled():
    stats = recurring_statistics([], {})
    assert stats["net_monthly"] == 0
    assert stats["expense_breakdown"] == []

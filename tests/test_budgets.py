from aggregation import MonthlyAggregator
from amounts import Breakdown, Flat
from budgets import BudgetResolver
from domain import (
    AlertKind,
    BudgetAlert,
    BudgetTemplate,
    Category,
    Ledger,
    MonthlyData,
)
from history import HistorySequence

EXPENSE_CATEGORIES = (
    Category(id="food", name="Food"),
    Category(id="housing", name="Housing"),
)


def make_template(**overrides) -> BudgetTemplate:
    values = dict(
        salary_history=HistorySequence.of(("2024-01", 300_000), ("2024-07", 320_000)),
        expense_history={
            "food": HistorySequence.of(
                ("2024-01", Flat(40_000)),
                ("2024-04", Breakdown({"groceries": 25_000, "restaurants": 15_000})),
            ),
        },
        allocation_history={
            "save": HistorySequence.of(("2024-02", 50_000)),
            "nisa": HistorySequence.of(("2024-01", 30_000), ("2024-05", 0)),
        },
        expense={"housing": Flat(80_000)},
    )
    values.update(overrides)
    return BudgetTemplate(**values)


def test_category_and_subcategory_budgets() -> None:
    resolver = BudgetResolver(make_template(), EXPENSE_CATEGORIES)

    assert resolver.resolved_category_budget("food", "2024-02") == 40_000
    assert resolver.resolved_category_budget("food", "2024-05") == 40_000
    assert resolver.resolved_subcategory_budget("food", "groceries", "2024-02") == 0
    assert resolver.resolved_subcategory_budget("food", "groceries", "2024-05") == 25_000
    assert resolver.resolved_subcategory_budget("food", "snacks", "2024-05") == 0
    assert resolver.resolved_category_budget("housing", "2024-05") == 80_000
    assert resolver.resolved_category_budget("transport", "2024-05") == 0


def test_history_falls_back_to_legacy_value_before_first_entry() -> None:
    template = make_template(expense={"food": Flat(35_000)})
    resolver = BudgetResolver(template, EXPENSE_CATEGORIES)
    assert resolver.resolved_category_budget("food", "2023-12") == 35_000


def test_salary_resolution_and_legacy_base_salary() -> None:
    resolver = BudgetResolver(make_template(), EXPENSE_CATEGORIES)
    assert resolver.resolved_salary("2024-06") == 300_000
    assert resolver.resolved_salary("2024-07") == 320_000
    assert resolver.resolved_salary("2023-01") == 0

    legacy = BudgetResolver(
        BudgetTemplate(base_salary=250_000), EXPENSE_CATEGORIES
    )
    assert legacy.resolved_salary("2024-01") == 250_000


def test_allocations_skip_zero_and_use_legacy_only_when_empty() -> None:
    resolver = BudgetResolver(
        make_template(account_allocations={"save": 10_000}), EXPENSE_CATEGORIES
    )
    assert resolver.resolved_allocations("2024-03") == {"save": 50_000, "nisa": 30_000}
    assert resolver.resolved_allocations("2024-06") == {"save": 50_000}
    assert resolver.resolved_allocations("2023-06") == {"save": 10_000}

    no_legacy = BudgetResolver(make_template(), EXPENSE_CATEGORIES)
    assert no_legacy.resolved_allocations("2023-06") == {}


def test_unallocated_may_go_negative() -> None:
    resolver = BudgetResolver(make_template(), EXPENSE_CATEGORIES)
    assert resolver.total_budgeted_expense("2024-03") == 120_000
    assert resolver.total_allocations("2024-03") == 80_000
    assert resolver.unallocated("2024-03") == 300_000 - 120_000 - 80_000

    tight = BudgetResolver(
        make_template(salary_history=HistorySequence.of(("2024-01", 100_000))),
        EXPENSE_CATEGORIES,
    )
    assert tight.unallocated("2024-03") == -100_000


def test_settings_effective_date() -> None:
    resolver = BudgetResolver(make_template(), EXPENSE_CATEGORIES)
    assert resolver.settings_effective_date("2024-03") == "2024-02"
    assert resolver.settings_effective_date("2024-12") == "2024-07"
    assert resolver.settings_effective_date("2023-01") is None
    assert BudgetResolver(BudgetTemplate(), ()).settings_effective_date("2024-01") is None


def test_status_and_alerts() -> None:
    template = make_template(
        alerts=(
            BudgetAlert(AlertKind.percentage, 80, "80% reached"),
            BudgetAlert(AlertKind.percentage, 100, "Over budget"),
            BudgetAlert(AlertKind.amount, 100_000, "Big spend"),
        )
    )
    ledger = Ledger(
        months={
            "2024-02": MonthlyData(
                month="2024-02", expense={"food": Flat(36_000), "housing": Flat(0)}
            )
        },
        expense_categories=EXPENSE_CATEGORIES,
        budget=template,
    )
    resolver = BudgetResolver(template, EXPENSE_CATEGORIES)
    statuses = {s.category_id: s for s in resolver.status("2024-02", MonthlyAggregator(ledger))}

    food = statuses["food"]
    assert food.budget == 40_000
    assert food.remaining == 4_000
    assert food.percentage == 90
    assert not food.is_over_budget
    assert [a.message for a in resolver.triggered_alerts(food)] == ["80% reached"]

    housing = statuses["housing"]
    assert housing.percentage == 0
    assert resolver.triggered_alerts(housing) == []


def test_status_without_budget_has_no_percentage() -> None:
    categories = (Category(id="hobby", name="Hobby"),)
    ledger = Ledger(
        months={"2024-02": MonthlyData(month="2024-02", expense={"hobby": Flat(500)})}
    )
    resolver = BudgetResolver(BudgetTemplate(), categories)
    (status,) = resolver.status("2024-02", MonthlyAggregator(ledger))
    assert status.percentage is None
    assert status.is_over_budget

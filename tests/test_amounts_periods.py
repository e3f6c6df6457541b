import pytest

import amounts
from amounts import Breakdown, Flat
from domain import Category, Subcategory
from periods import (
    active_categories,
    add_months,
    is_active,
    parse_month,
    resolve_period,
)


def test_total_of_flat_and_breakdown() -> None:
    assert amounts.total(Flat(45_000)) == 45_000
    assert amounts.total(Breakdown({"groceries": 30_000, "restaurants": 15_000})) == 45_000
    assert amounts.total(Breakdown({})) == 0


def test_raw_and_json_conversion() -> None:
    assert amounts.from_raw(1200) == Flat(1200)
    assert amounts.from_raw({"a": 1, "b": 2}) == Breakdown({"a": 1, "b": 2})
    assert amounts.to_raw(Breakdown({"a": 1})) == {"a": 1}
    assert amounts.from_json(amounts.to_json(Flat(7))) == Flat(7)


def test_is_active_bounds_are_inclusive() -> None:
    item = Subcategory(id="gym", name="Gym", start_month="2024-03", end_month="2024-06")
    assert not is_active(item, "2024-02")
    assert is_active(item, "2024-03")
    assert is_active(item, "2024-06")
    assert not is_active(item, "2024-07")
    assert is_active(Subcategory(id="x", name="X"), "1999-01")


def test_single_month_window_is_active_only_that_month() -> None:
    item = Subcategory(id="x", name="X", start_month="2024-05", end_month="2024-05")
    months = [add_months("2024-01", i) for i in range(12)]
    assert [m for m in months if is_active(item, m)] == ["2024-05"]


def test_active_categories_filters_subcategories_without_mutating() -> None:
    food = Category(
        id="food",
        name="Food",
        subcategories=(
            Subcategory(id="groceries", name="Groceries"),
            Subcategory(id="lunch", name="Lunch", end_month="2023-12"),
        ),
    )
    old = Category(id="old", name="Old", end_month="2023-06")

    active = active_categories([food, old], "2024-01")

    assert [c.id for c in active] == ["food"]
    assert [s.id for s in active[0].subcategories] == ["groceries"]
    assert len(food.subcategories) == 2


def test_month_helpers() -> None:
    assert add_months("2024-11", 3) == "2025-02"
    assert add_months("2024-01", -1) == "2023-12"
    with pytest.raises(ValueError):
        parse_month("2024-13")


def test_resolve_period() -> None:
    assert resolve_period(None).contains("1990-01")
    year = resolve_period("year", year=2024)
    assert year.contains("2024-07") and not year.contains("2025-01")
    rng = resolve_period("range", start="2024-02", end="2024-04")
    assert rng.select(["2024-05", "2024-02", "2024-04", "2024-01"]) == [
        "2024-02",
        "2024-04",
    ]
    with pytest.raises(ValueError):
        resolve_period("range", start="2024-05", end="2024-01")
    with pytest.raises(ValueError):
        resolve_period("year")


def test_fractional_amounts_are_rejected() -> None:
    assert amounts.from_raw(12.0) == Flat(12)
    with pytest.raises(ValueError):
        amounts.from_raw(12.5)
    with pytest.raises(ValueError):
        amounts.from_json('{"groceries": 100, "snacks": 0.5}')

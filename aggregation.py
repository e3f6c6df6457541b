from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from amounts import total
from domain import Direction, FlowRule, Ledger
from periods import Period


def resolve_account(
    rules: Mapping[str, FlowRule],
    category_id: str,
    direction: Direction,
    default_account_id: str,
) -> str:
    rule = rules.get(category_id)
    if rule is not None:
        target = rule.to_account if direction == Direction.income else rule.from_account
        if target:
            return target
    return default_account_id


@dataclass(frozen=True)
class PeriodTotals:
    income: int
    expense: int
    balance: int
    months: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SeriesPoint:
    month: str
    income: int
    expense: int


class MonthlyAggregator:
    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger

    def _direction_total(self, month: str, direction: Direction) -> int:
        data = self.ledger.monthly_data(month)
        return sum(total(amount) for amount in data.entries(direction).values())

    def total_income(self, month: str) -> int:
        return self._direction_total(month, Direction.income)

    def total_expense(self, month: str) -> int:
        return self._direction_total(month, Direction.expense)

    def category_total(
        self, direction: Direction, category_id: str, month: str
    ) -> int:
        amount = self.ledger.monthly_data(month).entries(direction).get(category_id)
        if amount is None:
            return 0
        return total(amount)

    def account_for(self, direction: Direction, category_id: str) -> str:
        return resolve_account(
            self.ledger.flow_rules.for_direction(direction),
            category_id,
            direction,
            self.ledger.roles.primary,
        )

    def totals_by_account(self, month: str, direction: Direction) -> dict[str, int]:
        by_account: dict[str, int] = defaultdict(int)
        for category_id, amount in (
            self.ledger.monthly_data(month).entries(direction).items()
        ):
            by_account[self.account_for(direction, category_id)] += total(amount)
        return dict(by_account)

    def account_filtered_total(
        self, month: str, direction: Direction, account_id: str
    ) -> int:
        return self.totals_by_account(month, direction).get(account_id, 0)

    def monthly_balance(self, month: str) -> int:
        """Primary-routed income minus primary-routed expense."""
        primary = self.ledger.roles.primary
        income = self.account_filtered_total(month, Direction.income, primary)
        expense = self.account_filtered_total(month, Direction.expense, primary)
        return income - expense

    def period_totals(self, period: Period) -> PeriodTotals:
        months = period.select(list(self.ledger.months))
        income = 0
        expense = 0
        for month in months:
            income += self.total_income(month)
            expense += self.total_expense(month)
        return PeriodTotals(
            income=income, expense=expense, balance=income - expense, months=months
        )

    def monthly_series(
        self, period: Period, excluded_categories: Optional[Iterable[str]] = None
    ) -> list[SeriesPoint]:
        excluded = set(excluded_categories or ())
        points: list[SeriesPoint] = []
        for month in period.select(list(self.ledger.months)):
            data = self.ledger.monthly_data(month)
            income = sum(
                total(a) for cid, a in data.income.items() if cid not in excluded
            )
            expense = sum(
                total(a) for cid, a in data.expense.items() if cid not in excluded
            )
            points.append(SeriesPoint(month=month, income=income, expense=expense))
        return points

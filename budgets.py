from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from aggregation import MonthlyAggregator
from amounts import Amount, Breakdown, total
from domain import AlertKind, BudgetAlert, BudgetTemplate, Category, Direction


@dataclass(frozen=True)
class BudgetStatus:
    category_id: str
    budget: int
    spent: int
    remaining: int
    percentage: Optional[float]
    is_over_budget: bool


class BudgetResolver:
    def __init__(
        self, template: BudgetTemplate, expense_categories: Sequence[Category]
    ) -> None:
        self.template = template
        self.expense_categories = expense_categories

    def resolved_salary(self, month: str) -> int:
        fallback = self.template.base_salary or 0
        return self.template.salary_history.resolve(month, fallback)

    def _resolved_expense(self, category_id: str, month: str) -> Optional[Amount]:
        legacy = self.template.expense.get(category_id)
        history = self.template.expense_history.get(category_id)
        if history is None:
            return legacy
        return history.resolve(month, legacy)

    def resolved_category_budget(self, category_id: str, month: str) -> int:
        amount = self._resolved_expense(category_id, month)
        if amount is None:
            return 0
        return total(amount)

    def resolved_subcategory_budget(
        self, category_id: str, subcategory_id: str, month: str
    ) -> int:
        amount = self._resolved_expense(category_id, month)
        if not isinstance(amount, Breakdown):
            return 0
        return amount.get(subcategory_id)

    def resolved_allocations(self, month: str) -> dict[str, int]:
        resolved: dict[str, int] = {}
        for account_id, history in self.template.allocation_history.items():
            amount = history.resolve(month, 0)
            if amount and amount > 0:
                resolved[account_id] = amount
        if not resolved and self.template.account_allocations is not None:
            return dict(self.template.account_allocations)
        return resolved

    def total_budgeted_expense(self, month: str) -> int:
        return sum(
            self.resolved_category_budget(category.id, month)
            for category in self.expense_categories
        )

    def total_allocations(self, month: str) -> int:
        return sum(self.resolved_allocations(month).values())

    def unallocated(self, month: str) -> int:
        return (
            self.resolved_salary(month)
            - self.total_budgeted_expense(month)
            - self.total_allocations(month)
        )

    def settings_effective_date(self, month: str) -> Optional[str]:
        sequences = [self.template.salary_history]
        sequences.extend(self.template.expense_history.values())
        sequences.extend(self.template.allocation_history.values())
        starts = [s.latest_start(month) for s in sequences]
        starts = [s for s in starts if s is not None]
        if not starts:
            return None
        return max(starts)

    def status(self, month: str, aggregator: MonthlyAggregator) -> list[BudgetStatus]:
        statuses: list[BudgetStatus] = []
        for category in self.expense_categories:
            budget = self.resolved_category_budget(category.id, month)
            spent = aggregator.category_total(Direction.expense, category.id, month)
            percentage = spent / budget * 100 if budget > 0 else None
            statuses.append(
                BudgetStatus(
                    category_id=category.id,
                    budget=budget,
                    spent=spent,
                    remaining=budget - spent,
                    percentage=percentage,
                    is_over_budget=spent > budget,
                )
            )
        return statuses

    def triggered_alerts(self, status: BudgetStatus) -> list[BudgetAlert]:
        triggered: list[BudgetAlert] = []
        for alert in self.template.alerts:
            if alert.kind == AlertKind.percentage:
                if status.percentage is not None and status.percentage >= alert.threshold:
                    triggered.append(alert)
            elif status.spent >= alert.threshold:
                triggered.append(alert)
        return triggered

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from amounts import total
from domain import Direction, MonthlyData, Recurring, RecurringTransfer, Transfer


def apply_recurrings(
    data: MonthlyData,
    items: Sequence[Recurring],
    transfers: Sequence[RecurringTransfer],
) -> MonthlyData:
    """Overwrite category entries and append transfers for enabled templates.

    Entries are overwritten, so re-applying items is harmless; transfers are
    appended again on every call.
    """
    income = dict(data.income)
    expense = dict(data.expense)
    for item in items:
        if not item.enabled:
            continue
        if item.direction == Direction.income:
            income[item.category_id] = item.amount
        else:
            expense[item.category_id] = item.amount

    appended = [
        Transfer(
            from_account=t.from_account,
            to_account=t.to_account,
            amount=t.amount,
            note=t.note or t.name,
        )
        for t in transfers
        if t.enabled
    ]
    return replace(
        data,
        income=income,
        expense=expense,
        transfers=tuple(data.transfers) + tuple(appended),
    )


def recurring_statistics(
    items: Sequence[Recurring], category_names: dict[str, str]
) -> dict[str, object]:
    total_income = 0
    total_expenses = 0
    income_by_category: dict[str, int] = {}
    expense_by_category: dict[str, int] = {}
    income_count = 0
    expense_count = 0

    for item in items:
        if not item.enabled:
            continue
        monthly = total(item.amount)
        name = category_names.get(item.category_id, item.category_id)
        if item.direction == Direction.income:
            total_income += monthly
            income_count += 1
            income_by_category[name] = income_by_category.get(name, 0) + monthly
        else:
            total_expenses += monthly
            expense_count += 1
            expense_by_category[name] = expense_by_category.get(name, 0) + monthly

    def build_breakdown(by_category: dict[str, int], grand_total: int) -> list[dict]:
        if grand_total == 0:
            return []
        rows = sorted(by_category.items(), key=lambda x: x[1], reverse=True)
        return [
            {"name": name, "amount": amount, "percent": amount / grand_total * 100}
            for name, amount in rows
        ]

    return {
        "total_monthly_income": total_income,
        "total_monthly_expenses": total_expenses,
        "net_monthly": total_income - total_expenses,
        "expense_breakdown": build_breakdown(expense_by_category, total_expenses),
        "income_breakdown": build_breakdown(income_by_category, total_income),
        "counts": {
            "income": income_count,
            "expense": expense_count,
            "total": income_count + expense_count,
        },
    }

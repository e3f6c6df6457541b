from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from amounts import Amount
from history import HistorySequence


class CategoryRole(str, Enum):
    income = "income"
    expense = "expense"
    transfer = "transfer"


class Direction(str, Enum):
    income = "income"
    expense = "expense"


class AccountType(str, Enum):
    bank = "bank"
    credit = "credit"
    cash = "cash"
    investment = "investment"
    pool = "pool"


class AlertKind(str, Enum):
    percentage = "percentage"
    amount = "amount"


@dataclass(frozen=True)
class Subcategory:
    id: str
    name: str
    start_month: Optional[str] = None
    end_month: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str = "#6B7280"
    subcategories: tuple[Subcategory, ...] = ()
    start_month: Optional[str] = None
    end_month: Optional[str] = None


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: AccountType = AccountType.bank
    color: str = "#6B7280"
    initial_balance: int = 0
    currency: str = "JPY"
    is_default: bool = False


@dataclass(frozen=True)
class FlowRule:
    from_account: Optional[str] = None
    to_account: Optional[str] = None


@dataclass(frozen=True)
class FlowRules:
    income: Mapping[str, FlowRule] = field(default_factory=dict)
    expense: Mapping[str, FlowRule] = field(default_factory=dict)

    def for_direction(self, direction: Direction) -> Mapping[str, FlowRule]:
        if direction == Direction.income:
            return self.income
        return self.expense


@dataclass(frozen=True)
class Transfer:
    from_account: str
    to_account: str
    amount: int
    note: Optional[str] = None


@dataclass(frozen=True)
class MonthlyData:
    month: str
    income: Mapping[str, Amount] = field(default_factory=dict)
    expense: Mapping[str, Amount] = field(default_factory=dict)
    transfers: tuple[Transfer, ...] = ()

    @classmethod
    def empty(cls, month: str) -> MonthlyData:
        return cls(month=month)

    def entries(self, direction: Direction) -> Mapping[str, Amount]:
        if direction == Direction.income:
            return self.income
        return self.expense


@dataclass(frozen=True)
class BudgetAlert:
    kind: AlertKind
    threshold: float
    message: str


@dataclass(frozen=True)
class BudgetTemplate:
    salary_history: HistorySequence[int] = field(default_factory=HistorySequence)
    expense_history: Mapping[str, HistorySequence[Amount]] = field(
        default_factory=dict
    )
    allocation_history: Mapping[str, HistorySequence[int]] = field(
        default_factory=dict
    )
    base_salary: Optional[int] = None
    expense: Mapping[str, Amount] = field(default_factory=dict)
    account_allocations: Optional[Mapping[str, int]] = None
    alerts: tuple[BudgetAlert, ...] = ()


@dataclass(frozen=True)
class Recurring:
    id: str
    name: str
    direction: Direction
    category_id: str
    amount: Amount
    enabled: bool = True
    note: Optional[str] = None


@dataclass(frozen=True)
class RecurringTransfer:
    id: str
    name: str
    from_account: str
    to_account: str
    amount: int
    enabled: bool = True
    note: Optional[str] = None


@dataclass(frozen=True)
class AccountRoles:
    primary: str = "account"
    savings: str = "save"
    pool: str = "pool"
    pool_reset_month: int = 3

    def for_accounts(self, accounts: Sequence[Account]) -> AccountRoles:
        """Fall back to the default-flagged (or first) account as primary."""
        ids = {a.id for a in accounts}
        if self.primary in ids or not accounts:
            return self
        fallback = next((a for a in accounts if a.is_default), accounts[0])
        return AccountRoles(
            primary=fallback.id,
            savings=self.savings,
            pool=self.pool,
            pool_reset_month=self.pool_reset_month,
        )


@dataclass(frozen=True)
class Ledger:
    """In-memory snapshot of everything the derivation engine reads."""

    accounts: tuple[Account, ...] = ()
    flow_rules: FlowRules = field(default_factory=FlowRules)
    months: Mapping[str, MonthlyData] = field(default_factory=dict)
    income_categories: tuple[Category, ...] = ()
    expense_categories: tuple[Category, ...] = ()
    transfer_categories: tuple[Category, ...] = ()
    budget: BudgetTemplate = field(default_factory=BudgetTemplate)
    roles: AccountRoles = field(default_factory=AccountRoles)

    def monthly_data(self, month: str) -> MonthlyData:
        return self.months.get(month) or MonthlyData.empty(month)

    def sorted_months(self) -> list[str]:
        return sorted(self.months)

    def account_ids(self) -> set[str]:
        return {a.id for a in self.accounts}

    def account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def categories(self, role: CategoryRole) -> tuple[Category, ...]:
        if role == CategoryRole.income:
            return self.income_categories
        if role == CategoryRole.expense:
            return self.expense_categories
        return self.transfer_categories

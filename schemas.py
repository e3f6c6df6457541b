from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from domain import AccountType, AlertKind, CategoryRole, Direction

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

MonthKey = Annotated[str, Field(pattern=MONTH_PATTERN)]
NonNegativeAmount = Annotated[int, Field(ge=0)]
CategoryAmountIn = Union[NonNegativeAmount, dict[str, NonNegativeAmount]]


class _Bounded(BaseModel):
    start_month: Optional[MonthKey] = None
    end_month: Optional[MonthKey] = None

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.start_month and self.end_month and self.start_month > self.end_month:
            raise ValueError("start_month must not be after end_month")
        return self


class SubcategoryIn(_Bounded):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)


class CategoryIn(_Bounded):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    role: CategoryRole
    color: str = Field(default="#6B7280", pattern=COLOR_PATTERN)
    subcategories: list[SubcategoryIn] = Field(default_factory=list)


class AccountIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    type: AccountType
    color: str = Field(default="#6B7280", pattern=COLOR_PATTERN)
    initial_balance: int = 0
    currency: str = Field(default="JPY", min_length=3, max_length=3)
    is_default: bool = False


class FlowRuleIn(BaseModel):
    from_account: Optional[str] = None
    to_account: Optional[str] = None


class EntryIn(BaseModel):
    month: MonthKey
    direction: Direction
    category_id: str = Field(..., min_length=1, max_length=100)
    amount: CategoryAmountIn


class TransferIn(BaseModel):
    month: MonthKey
    from_account: str = Field(..., min_length=1, max_length=100)
    to_account: str = Field(..., min_length=1, max_length=100)
    amount: int = Field(..., gt=0)
    note: Optional[str] = Field(default=None, max_length=200)


class SalaryHistoryIn(BaseModel):
    start_month: MonthKey
    amount: NonNegativeAmount


class ExpenseBudgetIn(BaseModel):
    category_id: str = Field(..., min_length=1, max_length=100)
    start_month: MonthKey
    amount: CategoryAmountIn


class AllocationIn(BaseModel):
    account_id: str = Field(..., min_length=1, max_length=100)
    start_month: MonthKey
    amount: NonNegativeAmount


class LegacyBudgetIn(BaseModel):
    base_salary: Optional[NonNegativeAmount] = None
    expense: dict[str, CategoryAmountIn] = Field(default_factory=dict)
    account_allocations: Optional[dict[str, NonNegativeAmount]] = None


class BudgetAlertIn(BaseModel):
    kind: AlertKind
    threshold: float = Field(..., gt=0)
    message: str = Field(..., min_length=1, max_length=200)


class RecurringIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=120)
    direction: Direction
    category_id: str = Field(..., min_length=1, max_length=100)
    amount: CategoryAmountIn
    enabled: bool = True
    note: Optional[str] = None


class RecurringTransferIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=120)
    from_account: str = Field(..., min_length=1, max_length=100)
    to_account: str = Field(..., min_length=1, max_length=100)
    amount: int = Field(..., gt=0)
    enabled: bool = True
    note: Optional[str] = None


class PeriodIn(BaseModel):
    kind: Literal["all", "year", "range"] = "all"
    year: Optional[int] = Field(default=None, ge=1970, le=3000)
    start_month: Optional[MonthKey] = None
    end_month: Optional[MonthKey] = None

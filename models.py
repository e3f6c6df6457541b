from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from domain import AccountType, AlertKind, CategoryRole, Direction


class BudgetHistoryKind(str, Enum):
    salary = "salary"
    expense = "expense"
    allocation = "allocation"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class CategoryRecord(Base, TimestampMixin):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[CategoryRole] = mapped_column(SAEnum(CategoryRole), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#6B7280")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_month: Mapped[Optional[str]] = mapped_column(String(7))
    end_month: Mapped[Optional[str]] = mapped_column(String(7))

    subcategories: Mapped[list["SubcategoryRecord"]] = relationship(
        "SubcategoryRecord",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="SubcategoryRecord.position",
    )

    __table_args__ = (
        UniqueConstraint("role", "key", name="uq_category_role_key"),
    )


class SubcategoryRecord(Base, TimestampMixin):
    __tablename__ = "subcategories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_month: Mapped[Optional[str]] = mapped_column(String(7))
    end_month: Mapped[Optional[str]] = mapped_column(String(7))

    category: Mapped["CategoryRecord"] = relationship(
        "CategoryRecord", back_populates="subcategories"
    )

    __table_args__ = (
        UniqueConstraint("category_id", "key", name="uq_subcategory_category_key"),
    )


class AccountRecord(Base, TimestampMixin):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[AccountType] = mapped_column(SAEnum(AccountType), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#6B7280")
    initial_balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="JPY")
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class FlowRuleRecord(Base, TimestampMixin):
    __tablename__ = "flow_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    direction: Mapped[Direction] = mapped_column(SAEnum(Direction), nullable=False)
    category_key: Mapped[str] = mapped_column(String(100), nullable=False)
    # plain account keys: history may outlive deleted accounts
    from_account: Mapped[Optional[str]] = mapped_column(String(100))
    to_account: Mapped[Optional[str]] = mapped_column(String(100))

    __table_args__ = (
        UniqueConstraint("direction", "category_key", name="uq_flow_rule_scope"),
    )


class MonthlyRecord(Base, TimestampMixin):
    __tablename__ = "monthly_records"

    month: Mapped[str] = mapped_column(String(7), primary_key=True)

    entries: Mapped[list["CategoryEntry"]] = relationship(
        "CategoryEntry",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="CategoryEntry.id",
    )
    transfers: Mapped[list["TransferRecord"]] = relationship(
        "TransferRecord",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="TransferRecord.position",
    )


class CategoryEntry(Base, TimestampMixin):
    __tablename__ = "category_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    month: Mapped[str] = mapped_column(
        ForeignKey("monthly_records.month", ondelete="CASCADE"), nullable=False
    )
    direction: Mapped[Direction] = mapped_column(SAEnum(Direction), nullable=False)
    category_key: Mapped[str] = mapped_column(String(100), nullable=False)
    amount_json: Mapped[str] = mapped_column(Text, nullable=False)

    record: Mapped["MonthlyRecord"] = relationship(
        "MonthlyRecord", back_populates="entries"
    )

    __table_args__ = (
        UniqueConstraint(
            "month", "direction", "category_key", name="uq_entry_month_category"
        ),
    )


class TransferRecord(Base, TimestampMixin):
    __tablename__ = "transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    month: Mapped[str] = mapped_column(
        ForeignKey("monthly_records.month", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    from_account: Mapped[str] = mapped_column(String(100), nullable=False)
    to_account: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    record: Mapped["MonthlyRecord"] = relationship(
        "MonthlyRecord", back_populates="transfers"
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
        Index("ix_transfers_month_position", "month", "position"),
    )


class BudgetHistoryRecord(Base, TimestampMixin):
    __tablename__ = "budget_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[BudgetHistoryKind] = mapped_column(
        SAEnum(BudgetHistoryKind), nullable=False
    )
    # category key, account key, or "" for salary
    key: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    start_month: Mapped[str] = mapped_column(String(7), nullable=False)
    amount_json: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "kind", "key", "start_month", name="uq_budget_history_scope_start"
        ),
        Index("ix_budget_history_kind_key", "kind", "key"),
    )


class BudgetSettingsRecord(Base, TimestampMixin):
    __tablename__ = "budget_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    base_salary: Mapped[Optional[int]] = mapped_column(Integer)
    legacy_expense_json: Mapped[Optional[str]] = mapped_column(Text)
    legacy_allocations_json: Mapped[Optional[str]] = mapped_column(Text)


class BudgetAlertRecord(Base, TimestampMixin):
    __tablename__ = "budget_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[AlertKind] = mapped_column(SAEnum(AlertKind), nullable=False)
    threshold: Mapped[float] = mapped_column(Float, nullable=False)
    message: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (
        CheckConstraint("threshold > 0", name="ck_budget_alert_threshold_positive"),
    )


class RecurringItemRecord(Base, TimestampMixin):
    __tablename__ = "recurring_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    direction: Mapped[Direction] = mapped_column(SAEnum(Direction), nullable=False)
    category_key: Mapped[str] = mapped_column(String(100), nullable=False)
    amount_json: Mapped[str] = mapped_column(Text, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)


class RecurringTransferRecord(Base, TimestampMixin):
    __tablename__ = "recurring_transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    from_account: Mapped[str] = mapped_column(String(100), nullable=False)
    to_account: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_recurring_transfer_amount_positive"),
    )

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

import amounts
from aggregation import MonthlyAggregator
from budgets import BudgetResolver
from config import account_roles, get_settings
from domain import (
    Account,
    BudgetAlert,
    BudgetTemplate,
    Category,
    CategoryRole,
    Direction,
    FlowRule,
    FlowRules,
    Ledger,
    MonthlyData,
    Recurring,
    RecurringTransfer,
    Subcategory,
    Transfer,
)
from flows import account_flows, sankey
from history import HistoryEntry, HistorySequence
from models import (
    AccountRecord,
    BudgetAlertRecord,
    BudgetHistoryKind,
    BudgetHistoryRecord,
    BudgetSettingsRecord,
    CategoryEntry,
    CategoryRecord,
    FlowRuleRecord,
    MonthlyRecord,
    RecurringItemRecord,
    RecurringTransferRecord,
    SubcategoryRecord,
    TransferRecord,
)
from periods import active_categories, parse_month, resolve_period
from projection import BalanceProjection
from recurrence import apply_recurrings, recurring_statistics
from schemas import (
    AccountIn,
    AllocationIn,
    BudgetAlertIn,
    CategoryIn,
    EntryIn,
    ExpenseBudgetIn,
    FlowRuleIn,
    LegacyBudgetIn,
    PeriodIn,
    RecurringIn,
    RecurringTransferIn,
    SalaryHistoryIn,
    SubcategoryIn,
    TransferIn,
)

logger = logging.getLogger(__name__)


def _category_to_domain(record: CategoryRecord) -> Category:
    return Category(
        id=record.key,
        name=record.name,
        color=record.color,
        subcategories=tuple(
            Subcategory(
                id=sub.key,
                name=sub.name,
                start_month=sub.start_month,
                end_month=sub.end_month,
            )
            for sub in record.subcategories
        ),
        start_month=record.start_month,
        end_month=record.end_month,
    )


def _account_to_domain(record: AccountRecord) -> Account:
    return Account(
        id=record.key,
        name=record.name,
        type=record.type,
        color=record.color,
        initial_balance=record.initial_balance,
        currency=record.currency,
        is_default=record.is_default,
    )


def _monthly_to_domain(record: MonthlyRecord) -> MonthlyData:
    income: dict[str, amounts.Amount] = {}
    expense: dict[str, amounts.Amount] = {}
    for entry in record.entries:
        target = income if entry.direction == Direction.income else expense
        target[entry.category_key] = amounts.from_json(entry.amount_json)
    transfers = tuple(
        Transfer(
            from_account=t.from_account,
            to_account=t.to_account,
            amount=t.amount,
            note=t.note,
        )
        for t in record.transfers
    )
    return MonthlyData(
        month=record.month, income=income, expense=expense, transfers=transfers
    )


class CategoryService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self, role: CategoryRole) -> list[CategoryRecord]:
        stmt = (
            select(CategoryRecord)
            .options(selectinload(CategoryRecord.subcategories))
            .where(CategoryRecord.role == role)
            .order_by(CategoryRecord.position, CategoryRecord.id)
        )
        return self.session.scalars(stmt).all()

    def get(self, role: CategoryRole, key: str) -> CategoryRecord:
        record = self.session.scalar(
            select(CategoryRecord).where(
                CategoryRecord.role == role, CategoryRecord.key == key
            )
        )
        if not record:
            raise ValueError("Category not found")
        return record

    def exists(self, role: CategoryRole, key: str) -> bool:
        return (
            self.session.scalar(
                select(CategoryRecord.id).where(
                    CategoryRecord.role == role, CategoryRecord.key == key
                )
            )
            is not None
        )

    def create(self, data: CategoryIn) -> CategoryRecord:
        if self.exists(data.role, data.id):
            raise ValueError("Category already exists")
        position = self.session.scalar(
            select(func.count(CategoryRecord.id)).where(
                CategoryRecord.role == data.role
            )
        )
        record = CategoryRecord(
            key=data.id,
            role=data.role,
            name=data.name,
            color=data.color,
            position=position or 0,
            start_month=data.start_month,
            end_month=data.end_month,
        )
        self.session.add(record)
        self._sync_subcategories(record, data.subcategories)
        self.session.commit()
        self.session.refresh(record)
        logger.info(f"category_created: role={data.role.value} id={data.id}")
        return record

    def update(self, role: CategoryRole, key: str, data: CategoryIn) -> CategoryRecord:
        record = self.get(role, key)
        if data.role != role or data.id != key:
            raise ValueError("Category id and role cannot be changed")
        record.name = data.name
        record.color = data.color
        record.start_month = data.start_month
        record.end_month = data.end_month
        self._sync_subcategories(record, data.subcategories)
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, role: CategoryRole, key: str) -> None:
        record = self.get(role, key)
        self.session.delete(record)
        self.session.commit()
        logger.info(f"category_deleted: role={role.value} id={key}")

    def add_subcategory(
        self, role: CategoryRole, key: str, data: SubcategoryIn
    ) -> CategoryRecord:
        record = self.get(role, key)
        if any(sub.key == data.id for sub in record.subcategories):
            raise ValueError("Subcategory already exists")
        record.subcategories.append(
            SubcategoryRecord(
                key=data.id,
                name=data.name,
                position=len(record.subcategories),
                start_month=data.start_month,
                end_month=data.end_month,
            )
        )
        self.session.commit()
        self.session.refresh(record)
        return record

    def update_subcategory(
        self, role: CategoryRole, key: str, data: SubcategoryIn
    ) -> CategoryRecord:
        record = self.get(role, key)
        sub = next((s for s in record.subcategories if s.key == data.id), None)
        if sub is None:
            raise ValueError("Subcategory not found")
        sub.name = data.name
        sub.start_month = data.start_month
        sub.end_month = data.end_month
        self.session.commit()
        self.session.refresh(record)
        return record

    def remove_subcategory(self, role: CategoryRole, key: str, sub_key: str) -> None:
        record = self.get(role, key)
        sub = next((s for s in record.subcategories if s.key == sub_key), None)
        if sub is None:
            raise ValueError("Subcategory not found")
        record.subcategories.remove(sub)
        self.session.commit()

    def _sync_subcategories(
        self, record: CategoryRecord, subcategories: list[SubcategoryIn]
    ) -> None:
        existing = {sub.key: sub for sub in record.subcategories}
        wanted = {sub.id for sub in subcategories}
        for sub in list(record.subcategories):
            if sub.key not in wanted:
                record.subcategories.remove(sub)
        for position, data in enumerate(subcategories):
            sub = existing.get(data.id)
            if sub is None:
                sub = SubcategoryRecord(key=data.id)
                record.subcategories.append(sub)
            sub.name = data.name
            sub.position = position
            sub.start_month = data.start_month
            sub.end_month = data.end_month

    def as_domain(self, role: CategoryRole) -> tuple[Category, ...]:
        return tuple(_category_to_domain(r) for r in self.list_all(role))


class AccountService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[AccountRecord]:
        stmt = select(AccountRecord).order_by(AccountRecord.position, AccountRecord.id)
        return self.session.scalars(stmt).all()

    def get(self, key: str) -> AccountRecord:
        record = self.session.scalar(
            select(AccountRecord).where(AccountRecord.key == key)
        )
        if not record:
            raise ValueError("Account not found")
        return record

    def _clear_default(self, keep: Optional[str] = None) -> None:
        for record in self.list_all():
            if record.key != keep:
                record.is_default = False

    def create(self, data: AccountIn) -> AccountRecord:
        existing = self.session.scalar(
            select(AccountRecord.id).where(AccountRecord.key == data.id)
        )
        if existing is not None:
            raise ValueError("Account already exists")
        if data.is_default:
            self._clear_default()
        position = self.session.scalar(select(func.count(AccountRecord.id)))
        record = AccountRecord(
            key=data.id,
            name=data.name,
            type=data.type,
            color=data.color,
            initial_balance=data.initial_balance,
            currency=data.currency,
            is_default=data.is_default,
            position=position or 0,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info(f"account_created: id={data.id} type={data.type.value}")
        return record

    def update(self, key: str, data: AccountIn) -> AccountRecord:
        record = self.get(key)
        if data.id != key:
            raise ValueError("Account id cannot be changed")
        if data.is_default:
            self._clear_default(keep=key)
        record.name = data.name
        record.type = data.type
        record.color = data.color
        record.initial_balance = data.initial_balance
        record.currency = data.currency
        record.is_default = data.is_default
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, key: str) -> None:
        # flow rules and transfers keep their references; the engine ignores them
        record = self.get(key)
        self.session.delete(record)
        self.session.commit()
        logger.info(f"account_deleted: id={key}")

    def set_flow_rule(
        self, direction: Direction, category_key: str, data: FlowRuleIn
    ) -> Optional[FlowRuleRecord]:
        for account_key in (data.from_account, data.to_account):
            if account_key:
                self.get(account_key)
        if not data.from_account and not data.to_account:
            self.clear_flow_rule(direction, category_key)
            return None
        record = self.session.scalar(
            select(FlowRuleRecord).where(
                FlowRuleRecord.direction == direction,
                FlowRuleRecord.category_key == category_key,
            )
        )
        if not record:
            record = FlowRuleRecord(direction=direction, category_key=category_key)
            self.session.add(record)
        record.from_account = data.from_account
        record.to_account = data.to_account
        self.session.commit()
        self.session.refresh(record)
        return record

    def clear_flow_rule(self, direction: Direction, category_key: str) -> None:
        record = self.session.scalar(
            select(FlowRuleRecord).where(
                FlowRuleRecord.direction == direction,
                FlowRuleRecord.category_key == category_key,
            )
        )
        if record:
            self.session.delete(record)
            self.session.commit()

    def flow_rules(self) -> FlowRules:
        income: dict[str, FlowRule] = {}
        expense: dict[str, FlowRule] = {}
        for record in self.session.scalars(
            select(FlowRuleRecord).order_by(FlowRuleRecord.id)
        ):
            target = income if record.direction == Direction.income else expense
            target[record.category_key] = FlowRule(
                from_account=record.from_account, to_account=record.to_account
            )
        return FlowRules(income=income, expense=expense)

    def as_domain(self) -> tuple[Account, ...]:
        return tuple(_account_to_domain(r) for r in self.list_all())


class MonthlyDataService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _record(self, month: str) -> Optional[MonthlyRecord]:
        return self.session.get(MonthlyRecord, month)

    def _get_or_create(self, month: str) -> MonthlyRecord:
        parse_month(month)
        record = self._record(month)
        if record is None:
            record = MonthlyRecord(month=month)
            self.session.add(record)
            self.session.flush()
            logger.info(f"monthly_record_created: month={month}")
        return record

    def months(self) -> list[str]:
        return list(
            self.session.scalars(
                select(MonthlyRecord.month).order_by(MonthlyRecord.month)
            )
        )

    def get(self, month: str) -> MonthlyData:
        record = self._record(month)
        if record is None:
            return MonthlyData.empty(month)
        return _monthly_to_domain(record)

    def all(self) -> dict[str, MonthlyData]:
        stmt = (
            select(MonthlyRecord)
            .options(
                selectinload(MonthlyRecord.entries),
                selectinload(MonthlyRecord.transfers),
            )
            .order_by(MonthlyRecord.month)
        )
        return {r.month: _monthly_to_domain(r) for r in self.session.scalars(stmt)}

    def _put_entry(
        self,
        record: MonthlyRecord,
        direction: Direction,
        category_key: str,
        amount: amounts.Amount,
    ) -> None:
        entry = next(
            (
                e
                for e in record.entries
                if e.direction == direction and e.category_key == category_key
            ),
            None,
        )
        if entry is None:
            entry = CategoryEntry(direction=direction, category_key=category_key)
            record.entries.append(entry)
        entry.amount_json = amounts.to_json(amount)

    def set_amount(self, data: EntryIn) -> MonthlyData:
        record = self._get_or_create(data.month)
        self._put_entry(
            record, data.direction, data.category_id, amounts.from_raw(data.amount)
        )
        self.session.commit()
        logger.info(
            f"month_entry_set: month={data.month} direction={data.direction.value} "
            f"category={data.category_id}"
        )
        return _monthly_to_domain(record)

    def clear_amount(
        self, month: str, direction: Direction, category_key: str
    ) -> MonthlyData:
        parse_month(month)
        record = self._record(month)
        if record is None:
            return MonthlyData.empty(month)
        for entry in list(record.entries):
            if entry.direction == direction and entry.category_key == category_key:
                record.entries.remove(entry)
        self.session.commit()
        return _monthly_to_domain(record)

    def add_transfer(self, data: TransferIn) -> MonthlyData:
        if data.from_account == data.to_account:
            raise ValueError("Transfer accounts must differ")
        record = self._get_or_create(data.month)
        record.transfers.append(
            TransferRecord(
                position=len(record.transfers),
                from_account=data.from_account,
                to_account=data.to_account,
                amount=data.amount,
                note=data.note,
            )
        )
        self.session.commit()
        logger.info(
            f"transfer_added: month={data.month} from={data.from_account} "
            f"to={data.to_account} amount={data.amount}"
        )
        return _monthly_to_domain(record)

    def remove_transfer(self, month: str, index: int) -> MonthlyData:
        parse_month(month)
        record = self._record(month)
        if record is None or not 0 <= index < len(record.transfers):
            raise ValueError("Transfer not found")
        record.transfers.pop(index)
        for position, transfer in enumerate(record.transfers):
            transfer.position = position
        self.session.commit()
        return _monthly_to_domain(record)

    def save(self, data: MonthlyData) -> MonthlyData:
        record = self._get_or_create(data.month)
        wanted: set[tuple[Direction, str]] = set()
        for direction in (Direction.income, Direction.expense):
            for category_key, amount in data.entries(direction).items():
                wanted.add((direction, category_key))
                self._put_entry(record, direction, category_key, amount)
        for entry in list(record.entries):
            if (entry.direction, entry.category_key) not in wanted:
                record.entries.remove(entry)

        for position, transfer in enumerate(data.transfers):
            if position < len(record.transfers):
                row = record.transfers[position]
            else:
                row = TransferRecord(position=position)
                record.transfers.append(row)
            row.from_account = transfer.from_account
            row.to_account = transfer.to_account
            row.amount = transfer.amount
            row.note = transfer.note
        del record.transfers[len(data.transfers):]
        self.session.commit()
        return _monthly_to_domain(record)


class BudgetService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _upsert_history(
        self, kind: BudgetHistoryKind, key: str, start_month: str, amount_json: str
    ) -> BudgetHistoryRecord:
        existing = self.session.scalar(
            select(BudgetHistoryRecord).where(
                BudgetHistoryRecord.kind == kind,
                BudgetHistoryRecord.key == key,
                BudgetHistoryRecord.start_month == start_month,
            )
        )
        if existing:
            existing.amount_json = amount_json
            self.session.commit()
            self.session.refresh(existing)
            return existing

        record = BudgetHistoryRecord(
            kind=kind, key=key, start_month=start_month, amount_json=amount_json
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info(
            f"budget_history_added: kind={kind.value} key={key} start={start_month}"
        )
        return record

    def upsert_salary(self, data: SalaryHistoryIn) -> BudgetHistoryRecord:
        return self._upsert_history(
            BudgetHistoryKind.salary, "", data.start_month, json.dumps(data.amount)
        )

    def upsert_expense_budget(self, data: ExpenseBudgetIn) -> BudgetHistoryRecord:
        if not CategoryService(self.session).exists(
            CategoryRole.expense, data.category_id
        ):
            raise ValueError("Budgets can only be set for expense categories")
        return self._upsert_history(
            BudgetHistoryKind.expense,
            data.category_id,
            data.start_month,
            amounts.to_json(amounts.from_raw(data.amount)),
        )

    def upsert_allocation(self, data: AllocationIn) -> BudgetHistoryRecord:
        AccountService(self.session).get(data.account_id)
        return self._upsert_history(
            BudgetHistoryKind.allocation,
            data.account_id,
            data.start_month,
            json.dumps(data.amount),
        )

    def delete_history_entry(
        self, kind: BudgetHistoryKind, key: str, start_month: str
    ) -> None:
        record = self.session.scalar(
            select(BudgetHistoryRecord).where(
                BudgetHistoryRecord.kind == kind,
                BudgetHistoryRecord.key == key,
                BudgetHistoryRecord.start_month == start_month,
            )
        )
        if not record:
            raise ValueError("History entry not found")
        self.session.delete(record)
        self.session.commit()

    def _settings_record(self) -> BudgetSettingsRecord:
        record = self.session.get(BudgetSettingsRecord, 1)
        if record is None:
            record = BudgetSettingsRecord(id=1)
            self.session.add(record)
            self.session.flush()
        return record

    def set_legacy(self, data: LegacyBudgetIn) -> BudgetSettingsRecord:
        record = self._settings_record()
        record.base_salary = data.base_salary
        record.legacy_expense_json = json.dumps(data.expense, sort_keys=True)
        record.legacy_allocations_json = (
            json.dumps(data.account_allocations, sort_keys=True)
            if data.account_allocations is not None
            else None
        )
        self.session.commit()
        return record

    def add_alert(self, data: BudgetAlertIn) -> BudgetAlertRecord:
        record = BudgetAlertRecord(
            kind=data.kind, threshold=data.threshold, message=data.message
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete_alert(self, alert_id: int) -> None:
        record = self.session.get(BudgetAlertRecord, alert_id)
        if not record:
            raise ValueError("Alert not found")
        self.session.delete(record)
        self.session.commit()

    def template(self) -> BudgetTemplate:
        salary: list[HistoryEntry[int]] = []
        expense: dict[str, list[HistoryEntry[amounts.Amount]]] = {}
        allocation: dict[str, list[HistoryEntry[int]]] = {}
        stmt = select(BudgetHistoryRecord).order_by(
            BudgetHistoryRecord.start_month, BudgetHistoryRecord.id
        )
        for record in self.session.scalars(stmt):
            if record.kind == BudgetHistoryKind.salary:
                salary.append(
                    HistoryEntry(record.start_month, int(json.loads(record.amount_json)))
                )
            elif record.kind == BudgetHistoryKind.expense:
                expense.setdefault(record.key, []).append(
                    HistoryEntry(record.start_month, amounts.from_json(record.amount_json))
                )
            else:
                allocation.setdefault(record.key, []).append(
                    HistoryEntry(record.start_month, int(json.loads(record.amount_json)))
                )

        settings = self.session.get(BudgetSettingsRecord, 1)
        legacy_expense: dict[str, amounts.Amount] = {}
        legacy_allocations: Optional[dict[str, int]] = None
        base_salary: Optional[int] = None
        if settings is not None:
            base_salary = settings.base_salary
            if settings.legacy_expense_json:
                legacy_expense = {
                    key: amounts.from_raw(raw)
                    for key, raw in json.loads(settings.legacy_expense_json).items()
                }
            if settings.legacy_allocations_json:
                legacy_allocations = {
                    key: int(value)
                    for key, value in json.loads(
                        settings.legacy_allocations_json
                    ).items()
                }

        alerts = tuple(
            BudgetAlert(kind=a.kind, threshold=a.threshold, message=a.message)
            for a in self.session.scalars(
                select(BudgetAlertRecord).order_by(BudgetAlertRecord.id)
            )
        )
        return BudgetTemplate(
            salary_history=HistorySequence(salary),
            expense_history={k: HistorySequence(v) for k, v in expense.items()},
            allocation_history={k: HistorySequence(v) for k, v in allocation.items()},
            base_salary=base_salary,
            expense=legacy_expense,
            account_allocations=legacy_allocations,
            alerts=alerts,
        )


class RecurringService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_item(self, key: str) -> RecurringItemRecord:
        record = self.session.scalar(
            select(RecurringItemRecord).where(RecurringItemRecord.key == key)
        )
        if not record:
            raise ValueError("Recurring item not found")
        return record

    def get_transfer(self, key: str) -> RecurringTransferRecord:
        record = self.session.scalar(
            select(RecurringTransferRecord).where(RecurringTransferRecord.key == key)
        )
        if not record:
            raise ValueError("Recurring transfer not found")
        return record

    def list_items(self) -> list[Recurring]:
        records = self.session.scalars(
            select(RecurringItemRecord).order_by(RecurringItemRecord.id)
        )
        return [
            Recurring(
                id=r.key,
                name=r.name,
                direction=r.direction,
                category_id=r.category_key,
                amount=amounts.from_json(r.amount_json),
                enabled=r.enabled,
                note=r.note,
            )
            for r in records
        ]

    def list_transfers(self) -> list[RecurringTransfer]:
        records = self.session.scalars(
            select(RecurringTransferRecord).order_by(RecurringTransferRecord.id)
        )
        return [
            RecurringTransfer(
                id=r.key,
                name=r.name,
                from_account=r.from_account,
                to_account=r.to_account,
                amount=r.amount,
                enabled=r.enabled,
                note=r.note,
            )
            for r in records
        ]

    def create_item(self, data: RecurringIn) -> RecurringItemRecord:
        role = CategoryRole(data.direction.value)
        if not CategoryService(self.session).exists(role, data.category_id):
            raise ValueError("Category not found")
        record = RecurringItemRecord(key=data.id)
        self._fill_item(record, data)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def update_item(self, key: str, data: RecurringIn) -> RecurringItemRecord:
        record = self.get_item(key)
        self._fill_item(record, data)
        self.session.commit()
        self.session.refresh(record)
        return record

    @staticmethod
    def _fill_item(record: RecurringItemRecord, data: RecurringIn) -> None:
        record.name = data.name
        record.direction = data.direction
        record.category_key = data.category_id
        record.amount_json = amounts.to_json(amounts.from_raw(data.amount))
        record.enabled = data.enabled
        record.note = data.note

    def toggle_item(self, key: str, enabled: bool) -> None:
        self.get_item(key).enabled = enabled
        self.session.commit()

    def delete_item(self, key: str) -> None:
        self.session.delete(self.get_item(key))
        self.session.commit()

    def _check_transfer_accounts(self, data: RecurringTransferIn) -> None:
        if data.from_account == data.to_account:
            raise ValueError("Transfer accounts must differ")
        accounts_service = AccountService(self.session)
        accounts_service.get(data.from_account)
        accounts_service.get(data.to_account)

    @staticmethod
    def _fill_transfer(
        record: RecurringTransferRecord, data: RecurringTransferIn
    ) -> None:
        record.name = data.name
        record.from_account = data.from_account
        record.to_account = data.to_account
        record.amount = data.amount
        record.enabled = data.enabled
        record.note = data.note

    def create_transfer(self, data: RecurringTransferIn) -> RecurringTransferRecord:
        self._check_transfer_accounts(data)
        record = RecurringTransferRecord(key=data.id)
        self._fill_transfer(record, data)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def update_transfer(
        self, key: str, data: RecurringTransferIn
    ) -> RecurringTransferRecord:
        record = self.get_transfer(key)
        self._check_transfer_accounts(data)
        self._fill_transfer(record, data)
        self.session.commit()
        self.session.refresh(record)
        return record

    def toggle_transfer(self, key: str, enabled: bool) -> None:
        self.get_transfer(key).enabled = enabled
        self.session.commit()

    def delete_transfer(self, key: str) -> None:
        self.session.delete(self.get_transfer(key))
        self.session.commit()

    def apply_to_month(self, month: str) -> MonthlyData:
        parse_month(month)
        monthly = MonthlyDataService(self.session)
        items = self.list_items()
        transfers = self.list_transfers()
        updated = apply_recurrings(monthly.get(month), items, transfers)
        result = monthly.save(updated)
        logger.info(
            f"recurrings_applied: month={month} "
            f"items={sum(1 for i in items if i.enabled)} "
            f"transfers={sum(1 for t in transfers if t.enabled)}"
        )
        return result

    def statistics(self) -> dict[str, object]:
        names: dict[str, str] = {}
        categories = CategoryService(self.session)
        for role in (CategoryRole.income, CategoryRole.expense):
            for record in categories.list_all(role):
                names[record.key] = record.name
        return recurring_statistics(self.list_items(), names)


DEFAULT_CATEGORIES: dict[CategoryRole, list[dict]] = {
    CategoryRole.income: [
        {
            "id": "salary",
            "name": "Salary",
            "color": "#10B981",
            "subcategories": [
                {"id": "main_job", "name": "Main job"},
                {"id": "side_job", "name": "Side job"},
            ],
        },
        {
            "id": "investment",
            "name": "Investment income",
            "color": "#3B82F6",
            "subcategories": [
                {"id": "dividends", "name": "Dividends"},
                {"id": "interest", "name": "Interest"},
            ],
        },
    ],
    CategoryRole.expense: [
        {
            "id": "food",
            "name": "Food",
            "color": "#F59E0B",
            "subcategories": [
                {"id": "groceries", "name": "Groceries"},
                {"id": "restaurants", "name": "Restaurants"},
            ],
        },
        {
            "id": "housing",
            "name": "Housing",
            "color": "#EF4444",
            "subcategories": [
                {"id": "rent", "name": "Rent"},
                {"id": "utilities", "name": "Utilities"},
            ],
        },
        {
            "id": "transportation",
            "name": "Transportation",
            "color": "#8B5CF6",
            "subcategories": [
                {"id": "train", "name": "Train"},
                {"id": "gas", "name": "Gas"},
            ],
        },
    ],
    CategoryRole.transfer: [
        {"id": "transfer", "name": "Transfer", "color": "#6B7280"},
    ],
}


class LedgerService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def seed_defaults(self) -> bool:
        has_accounts = self.session.scalar(select(func.count(AccountRecord.id)))
        has_categories = self.session.scalar(select(func.count(CategoryRecord.id)))
        if has_accounts or has_categories:
            return False

        settings = get_settings()
        categories = CategoryService(self.session)
        for role, rows in DEFAULT_CATEGORIES.items():
            for row in rows:
                categories.create(CategoryIn(role=role, **row))

        accounts = AccountService(self.session)
        defaults = [
            (settings.primary_account, "Checking", "bank", "#2563EB", True),
            (settings.savings_account, "Savings", "bank", "#059669", False),
            (settings.pool_account, "Pool", "pool", "#F59E0B", False),
            ("cash", "Cash", "cash", "#78716C", False),
        ]
        for key, name, type_, color, is_default in defaults:
            accounts.create(
                AccountIn(
                    id=key,
                    name=name,
                    type=type_,
                    color=color,
                    currency=settings.currency,
                    is_default=is_default,
                )
            )
        logger.info("ledger_seeded: defaults created")
        return True

    def load(self) -> Ledger:
        categories = CategoryService(self.session)
        accounts_service = AccountService(self.session)
        accounts = accounts_service.as_domain()
        roles = account_roles(get_settings()).for_accounts(accounts)
        return Ledger(
            accounts=accounts,
            flow_rules=accounts_service.flow_rules(),
            months=MonthlyDataService(self.session).all(),
            income_categories=categories.as_domain(CategoryRole.income),
            expense_categories=categories.as_domain(CategoryRole.expense),
            transfer_categories=categories.as_domain(CategoryRole.transfer),
            budget=BudgetService(self.session).template(),
            roles=roles,
        )


class MetricsService:
    def __init__(self, session: Session, ledger: Optional[Ledger] = None) -> None:
        self.session = session
        self.ledger = ledger or LedgerService(session).load()
        self.aggregator = MonthlyAggregator(self.ledger)
        self.projection = BalanceProjection(self.ledger)
        self.budgets = BudgetResolver(
            self.ledger.budget, self.ledger.expense_categories
        )

    def balances(self, month: Optional[str] = None) -> dict[str, int]:
        if month is None:
            return self.projection.all_balances()
        return self.projection.balances_up_to(month)

    def month_summary(self, month: str) -> dict[str, object]:
        income = self.aggregator.total_income(month)
        expense = self.aggregator.total_expense(month)
        balances = self.projection.balances_up_to(month)
        reset = self.projection.pool_yearly_reset(month)
        return {
            "month": month,
            "income": income,
            "expense": expense,
            "balance": income - expense,
            "monthly_balance": self.aggregator.monthly_balance(month),
            "settlement": self.projection.settlement_amount(month),
            "income_by_account": self.aggregator.totals_by_account(
                month, Direction.income
            ),
            "expense_by_account": self.aggregator.totals_by_account(
                month, Direction.expense
            ),
            "balances": balances,
            "total_assets": sum(balances.values()),
            "pool_reset": asdict(reset) if reset else None,
        }

    def period_summary(self, data: PeriodIn) -> dict[str, object]:
        period = resolve_period(
            data.kind, year=data.year, start=data.start_month, end=data.end_month
        )
        totals = self.aggregator.period_totals(period)
        series = self.aggregator.monthly_series(
            period, get_settings().series_excluded_categories
        )
        return {
            "income": totals.income,
            "expense": totals.expense,
            "balance": totals.balance,
            "months": totals.months,
            "series": [asdict(point) for point in series],
        }

    def budget_overview(self, month: str) -> dict[str, object]:
        statuses = []
        for status in self.budgets.status(month, self.aggregator):
            row = asdict(status)
            row["alerts"] = [a.message for a in self.budgets.triggered_alerts(status)]
            statuses.append(row)
        return {
            "month": month,
            "salary": self.budgets.resolved_salary(month),
            "allocations": self.budgets.resolved_allocations(month),
            "total_budgeted_expense": self.budgets.total_budgeted_expense(month),
            "total_allocations": self.budgets.total_allocations(month),
            "unallocated": self.budgets.unallocated(month),
            "effective_since": self.budgets.settings_effective_date(month),
            "categories": statuses,
        }

    def active_categories(self, role: CategoryRole, month: str) -> list[Category]:
        return active_categories(self.ledger.categories(role), month)

    def account_flows(self, month: str) -> list[dict[str, object]]:
        return [asdict(flow) for flow in account_flows(self.ledger, month)]

    def sankey(self, month: str) -> dict[str, object]:
        return asdict(sankey(self.ledger, month))

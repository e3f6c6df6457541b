from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from aggregation import MonthlyAggregator
from amounts import total
from domain import Direction, Ledger
from projection import POOL_TO_SAVE, BalanceProjection

INCOME_NODE = "income"
EXPENSE_NODE = "expense"


class FlowKind(str, Enum):
    income = "income"
    transfer = "transfer"
    expense = "expense"
    settlement = "settlement"
    pool_reset = "pool_reset"


class NodeType(str, Enum):
    income = "income"
    account = "account"
    expense = "expense"


@dataclass(frozen=True)
class AccountFlow:
    source: str
    target: str
    amount: int
    kind: FlowKind
    label: Optional[str] = None


@dataclass(frozen=True)
class SankeyNode:
    id: str
    name: str
    type: NodeType
    color: str


@dataclass(frozen=True)
class SankeyLink:
    source: str
    target: str
    value: int


@dataclass
class SankeyData:
    nodes: list[SankeyNode] = field(default_factory=list)
    links: list[SankeyLink] = field(default_factory=list)


def account_flows(ledger: Ledger, month: str) -> list[AccountFlow]:
    """Edges between the income/expense pseudo-nodes and accounts for a month."""
    aggregator = MonthlyAggregator(ledger)
    projection = BalanceProjection(ledger)
    account_ids = ledger.account_ids()
    roles = ledger.roles
    flows: list[AccountFlow] = []

    for account_id, amount in aggregator.totals_by_account(
        month, Direction.income
    ).items():
        if amount > 0 and account_id in account_ids:
            flows.append(AccountFlow(INCOME_NODE, account_id, amount, FlowKind.income))

    for transfer in ledger.monthly_data(month).transfers:
        if transfer.from_account in account_ids and transfer.to_account in account_ids:
            flows.append(
                AccountFlow(
                    transfer.from_account,
                    transfer.to_account,
                    transfer.amount,
                    FlowKind.transfer,
                    transfer.note,
                )
            )

    for account_id, amount in aggregator.totals_by_account(
        month, Direction.expense
    ).items():
        if amount > 0 and account_id in account_ids:
            flows.append(
                AccountFlow(account_id, EXPENSE_NODE, amount, FlowKind.expense)
            )

    if roles.primary in account_ids and roles.savings in account_ids:
        net = projection.settlement_amount(month)
        if net > 0:
            flows.append(
                AccountFlow(roles.primary, roles.savings, net, FlowKind.settlement)
            )
        elif net < 0:
            flows.append(
                AccountFlow(roles.savings, roles.primary, -net, FlowKind.settlement)
            )

    reset = projection.pool_yearly_reset(month)
    if reset is not None:
        if reset.direction == POOL_TO_SAVE:
            source, target = roles.pool, roles.savings
        else:
            source, target = roles.savings, roles.pool
        flows.append(AccountFlow(source, target, reset.amount, FlowKind.pool_reset))

    return flows


def sankey(ledger: Ledger, month: str) -> SankeyData:
    data = ledger.monthly_data(month)
    aggregator = MonthlyAggregator(ledger)
    nodes: list[SankeyNode] = []
    for category in ledger.income_categories:
        nodes.append(
            SankeyNode(
                f"income-{category.id}", category.name, NodeType.income, category.color
            )
        )
    for account in ledger.accounts:
        nodes.append(
            SankeyNode(
                f"account-{account.id}", account.name, NodeType.account, account.color
            )
        )
    for category in ledger.expense_categories:
        nodes.append(
            SankeyNode(
                f"expense-{category.id}",
                category.name,
                NodeType.expense,
                category.color,
            )
        )

    values: dict[tuple[str, str], int] = {}

    def add(source: str, target: str, value: int) -> None:
        values[(source, target)] = values.get((source, target), 0) + value

    for category_id, amount in data.income.items():
        value = total(amount)
        if value > 0:
            account_id = aggregator.account_for(Direction.income, category_id)
            add(f"income-{category_id}", f"account-{account_id}", value)
    for category_id, amount in data.expense.items():
        value = total(amount)
        if value > 0:
            account_id = aggregator.account_for(Direction.expense, category_id)
            add(f"account-{account_id}", f"expense-{category_id}", value)
    for transfer in data.transfers:
        if transfer.amount > 0:
            add(
                f"account-{transfer.from_account}",
                f"account-{transfer.to_account}",
                transfer.amount,
            )

    links = [
        SankeyLink(source, target, value)
        for (source, target), value in values.items()
        if value > 0
    ]
    linked = {link.source for link in links} | {link.target for link in links}
    return SankeyData(nodes=[n for n in nodes if n.id in linked], links=links)

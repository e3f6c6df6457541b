from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from aggregation import MonthlyAggregator
from amounts import total
from domain import Direction, Ledger, MonthlyData
from periods import calendar_month

logger = logging.getLogger(__name__)

POOL_TO_SAVE = "pool-to-save"
SAVE_TO_POOL = "save-to-pool"


@dataclass(frozen=True)
class PoolReset:
    amount: int
    direction: str


class BalanceProjection:
    """Replays stored months in order to derive running account balances.

    Each month applies, in order: income, expense, explicit transfers, the
    primary/savings month-end settlement and, in the configured reset month,
    the sweep of the pool account into savings.
    """

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self.roles = ledger.roles
        self.aggregator = MonthlyAggregator(ledger)

    def _initial_balances(self) -> dict[str, int]:
        return {a.id: a.initial_balance for a in self.ledger.accounts}

    def settlement_amount(self, month: str) -> int:
        primary = self.roles.primary
        net = self.aggregator.monthly_balance(month)
        for transfer in self.ledger.monthly_data(month).transfers:
            if transfer.from_account == primary:
                net -= transfer.amount
            if transfer.to_account == primary:
                net += transfer.amount
        return net

    def _is_reset_month(self, month: str) -> bool:
        return calendar_month(month) == self.roles.pool_reset_month

    def _apply_entries(self, balances: dict[str, int], data: MonthlyData) -> None:
        for direction, sign in ((Direction.income, 1), (Direction.expense, -1)):
            for category_id, amount in data.entries(direction).items():
                account_id = self.aggregator.account_for(direction, category_id)
                if account_id not in balances:
                    logger.debug(
                        f"projection_skip: month={data.month} direction={direction.value} "
                        f"category={category_id} account={account_id}"
                    )
                    continue
                balances[account_id] += sign * total(amount)

    def _apply_transfers(self, balances: dict[str, int], data: MonthlyData) -> None:
        for transfer in data.transfers:
            if transfer.from_account not in balances or transfer.to_account not in balances:
                logger.debug(
                    f"projection_skip_transfer: month={data.month} "
                    f"from={transfer.from_account} to={transfer.to_account}"
                )
                continue
            balances[transfer.from_account] -= transfer.amount
            balances[transfer.to_account] += transfer.amount

    def _apply_settlement(self, balances: dict[str, int], month: str) -> None:
        primary, savings = self.roles.primary, self.roles.savings
        if primary not in balances or savings not in balances:
            return
        net = self.settlement_amount(month)
        balances[savings] += net
        balances[primary] -= net

    def _apply_pool_reset(self, balances: dict[str, int], month: str) -> None:
        pool, savings = self.roles.pool, self.roles.savings
        if not self._is_reset_month(month):
            return
        if pool not in balances or savings not in balances:
            return
        balances[savings] += balances[pool]
        balances[pool] = 0

    def apply_month(
        self, balances: dict[str, int], month: str, *, pool_reset: bool = True
    ) -> dict[str, int]:
        data = self.ledger.monthly_data(month)
        self._apply_entries(balances, data)
        self._apply_transfers(balances, data)
        self._apply_settlement(balances, month)
        if pool_reset:
            self._apply_pool_reset(balances, month)
        return balances

    def _replay(self, months: list[str]) -> dict[str, int]:
        balances = self._initial_balances()
        for month in months:
            self.apply_month(balances, month)
        return balances

    def all_balances(self) -> dict[str, int]:
        return self._replay(self.ledger.sorted_months())

    def _balances_before(self, month: str) -> dict[str, int]:
        return self._replay([m for m in self.ledger.sorted_months() if m < month])

    def balances_up_to(self, month: str) -> dict[str, int]:
        """Balances after ``month``; a month with no record replays as empty."""
        return self.apply_month(self._balances_before(month), month)

    def snapshots(self) -> Iterator[tuple[str, dict[str, int]]]:
        """Yield (month, balances after that month) folding incrementally."""
        balances = self._initial_balances()
        for month in self.ledger.sorted_months():
            self.apply_month(balances, month)
            yield month, dict(balances)

    def total_assets(self, month: Optional[str] = None) -> int:
        balances = self.all_balances() if month is None else self.balances_up_to(month)
        return sum(balances.values())

    def pool_yearly_reset(self, month: str) -> Optional[PoolReset]:
        pool, savings = self.roles.pool, self.roles.savings
        if not self._is_reset_month(month):
            return None
        balances = self._balances_before(month)
        if pool not in balances or savings not in balances:
            return None
        self.apply_month(balances, month, pool_reset=False)
        pool_balance = balances[pool]
        if pool_balance == 0:
            return None
        return PoolReset(
            amount=abs(pool_balance),
            direction=POOL_TO_SAVE if pool_balance > 0 else SAVE_TO_POOL,
        )

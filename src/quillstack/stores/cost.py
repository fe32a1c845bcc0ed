"""Token and dollar accounting for remote model calls, with budget alerts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from quillstack.models import BudgetPeriod, BudgetStatus, CostUsage, HorizonUsage
from quillstack.stores.kv import KeyValueStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "cost."

# Order in which horizons are checked for alerts
_ALERT_ORDER = (BudgetPeriod.DAILY, BudgetPeriod.MONTHLY, BudgetPeriod.LIFETIME)


def calculate_cost(
    input_tokens: int, output_tokens: int, input_rate: float, output_rate: float
) -> float:
    """USD cost for token counts at flat per-million-token rates."""
    return input_tokens / 1_000_000 * input_rate + output_tokens / 1_000_000 * output_rate


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CostLedger:
    """Lifetime, daily and monthly token tallies persisted in a KeyValueStore.

    Daily tallies reset when the UTC calendar day changes, monthly tallies when
    the UTC calendar month changes. Lifetime tallies only reset on request.
    """

    def __init__(
        self,
        store: KeyValueStore,
        input_rate: float = 3.00,
        output_rate: float = 15.00,
        daily_budget_usd: float | None = 5.00,
        monthly_budget_usd: float | None = 150.00,
        lifetime_budget_usd: float | None = None,
        alert_threshold: float = 0.80,
        alert_thresholds: dict[BudgetPeriod, float] | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self.input_rate = input_rate
        self.output_rate = output_rate
        self.budgets: dict[BudgetPeriod, float | None] = {
            BudgetPeriod.DAILY: daily_budget_usd,
            BudgetPeriod.MONTHLY: monthly_budget_usd,
            BudgetPeriod.LIFETIME: lifetime_budget_usd,
        }
        self.alert_threshold = alert_threshold
        self.alert_thresholds = {period: alert_threshold for period in BudgetPeriod}
        if alert_thresholds:
            self.alert_thresholds.update(alert_thresholds)
        self._clock = clock

    def _key(self, period: BudgetPeriod, metric: str) -> str:
        return f"{_KEY_PREFIX}{period.value}.{metric}"

    def _expired(self, period: BudgetPeriod, started: datetime, now: datetime) -> bool:
        if period == BudgetPeriod.DAILY:
            return started.date() != now.date()
        if period == BudgetPeriod.MONTHLY:
            return (started.year, started.month) != (now.year, now.month)
        return False

    def _reset_expired(self, now: datetime) -> None:
        """Zero any horizon whose calendar period has rolled over. Caller holds the lock."""
        updates: dict[str, float] = {}
        for period in (BudgetPeriod.DAILY, BudgetPeriod.MONTHLY):
            raw_start = self._store.get(self._key(period, "period_start"))
            started = datetime.fromtimestamp(raw_start, UTC) if raw_start else None
            if started is None or self._expired(period, started, now):
                if started is not None:
                    logger.debug("Cost horizon '%s' rolled over, resetting", period.value)
                updates.update(
                    {
                        self._key(period, "input_tokens"): 0,
                        self._key(period, "output_tokens"): 0,
                        self._key(period, "calls"): 0,
                        self._key(period, "period_start"): now.timestamp(),
                    }
                )
        if updates:
            self._store.set_many(updates)

    def _horizon(self, period: BudgetPeriod) -> HorizonUsage:
        input_tokens = int(self._store.get(self._key(period, "input_tokens")))
        output_tokens = int(self._store.get(self._key(period, "output_tokens")))
        return HorizonUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            calls=int(self._store.get(self._key(period, "calls"))),
            cost_usd=calculate_cost(input_tokens, output_tokens, self.input_rate, self.output_rate),
            budget_usd=self.budgets[period],
        )

    def record(self, input_tokens: int, output_tokens: int) -> None:
        """Add one completed call's token usage to every horizon."""
        with self._store.lock:
            self._reset_expired(self._clock())
            updates: dict[str, float] = {}
            for period in BudgetPeriod:
                updates[self._key(period, "input_tokens")] = (
                    self._store.get(self._key(period, "input_tokens")) + input_tokens
                )
                updates[self._key(period, "output_tokens")] = (
                    self._store.get(self._key(period, "output_tokens")) + output_tokens
                )
                updates[self._key(period, "calls")] = self._store.get(self._key(period, "calls")) + 1
            self._store.set_many(updates)
        logger.debug("Recorded usage: %d input / %d output tokens", input_tokens, output_tokens)

    def usage(self) -> CostUsage:
        """Current tallies for all horizons."""
        with self._store.lock:
            self._reset_expired(self._clock())
            return CostUsage(
                lifetime=self._horizon(BudgetPeriod.LIFETIME),
                daily=self._horizon(BudgetPeriod.DAILY),
                monthly=self._horizon(BudgetPeriod.MONTHLY),
                alert_threshold=self.alert_threshold,
            )

    def status(self) -> BudgetStatus:
        """Exceeded on any horizon wins over Approaching; otherwise WithinBudget."""
        usage = self.usage()
        horizons = {
            BudgetPeriod.DAILY: usage.daily,
            BudgetPeriod.MONTHLY: usage.monthly,
            BudgetPeriod.LIFETIME: usage.lifetime,
        }
        approaching: BudgetStatus | None = None
        for period in _ALERT_ORDER:
            budget = self.budgets[period]
            if not budget:
                continue
            current = horizons[period].cost_usd
            if current >= budget:
                return BudgetStatus.exceeded(period, current, budget)
            if approaching is None and current >= budget * self.alert_thresholds[period]:
                approaching = BudgetStatus.approaching(period, current, budget)
        return approaching or BudgetStatus.within_budget()

    def reset(self) -> None:
        """Clear every horizon, including lifetime totals."""
        with self._store.lock:
            self._store.delete_prefix(_KEY_PREFIX)

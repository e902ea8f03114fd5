"""Append-only price history and "changed recently" queries."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeplans.domain.model import PriceHistory
from homeplans.domain.time_windows import Clock, TrailingWindow, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from homeplans.domain.model import Plan
    from homeplans.domain.ports.persistence import PriceHistoryRepository

DEFAULT_PRICE_CHANGE_WINDOW = timedelta(hours=24)

log = logging.getLogger(__name__)


class PriceLedger:
    """Record price-change events and answer window membership queries.

    Events are never merged or deduplicated: a price that goes up and back down
    produces two events.
    """

    def __init__(self, price_history: PriceHistoryRepository, *, clock: Clock = utcnow) -> None:
        self._price_history = price_history
        self._clock = clock

    def record_price_change(
        self,
        plan_id: UUID,
        old_price: float,
        new_price: float,
        at: datetime | None = None,
    ) -> PriceHistory:
        event = PriceHistory(
            plan_id=plan_id,
            old_price=old_price,
            new_price=new_price,
            changed_at=at or self._clock(),
        )
        self._price_history.add(event)
        log.debug("Price change for plan %s: %s -> %s", plan_id, old_price, new_price)
        return event

    def changed_within(
        self,
        plan_ids: Iterable[UUID],
        window: timedelta = DEFAULT_PRICE_CHANGE_WINDOW,
    ) -> set[UUID]:
        """Return the ids among ``plan_ids`` with an event at or after ``now - window``."""

        candidates = set(plan_ids)
        if not candidates:
            return set()
        since = TrailingWindow(window).start(clock=self._clock)
        return self._price_history.plan_ids_changed_since(candidates, since) & candidates

    def observe_price(self, plan: Plan, new_price: float, at: datetime | None = None) -> bool:
        """Apply an observed price to ``plan``, appending history first.

        Returns ``True`` when the price changed. The event is added before the plan is
        mutated so no reader inside the same transaction sees a new price without
        its history. A plan without a stored price records no event.
        """

        observed_at = at or self._clock()
        if plan.price is None:
            plan.price = new_price
            plan.last_updated = observed_at
            return False
        if plan.price == new_price:
            return False

        self.record_price_change(plan.id, plan.price, new_price, at=observed_at)
        plan.price = new_price
        plan.last_updated = observed_at
        return True

    def history(self, plan_id: UUID) -> Sequence[PriceHistory]:
        return self._price_history.list_for_plan(plan_id)

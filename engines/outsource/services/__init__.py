"""
FOS Outsource Engine — Service Layer
====================================
Partner-order lifecycle and partner statistics.

Lifecycle (OUTSOURCE_ORDER_WORKFLOW):
    pending → accepted → completed
    pending | accepted → canceled
completed and canceled are terminal.

profit = order_total − partner_price, recomputed whenever the
partner price changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.errors import ValidationError
from core.events import SubscriberRegistry, publish
from core.primitives.money import require_money
from core.primitives.workflow import OUTSOURCE_ORDER_WORKFLOW
from core.time.clock import Clock, business_date
from core.time.temporal import DateWindow
from engines.outsource.commands import (
    OUTSOURCE_CANCELED,
    OUTSOURCE_PENDING,
    UNNAMED_PARTNER,
    OutsourceRecord,
)
from engines.outsource.events import build_outsource_payload, event_type_for
from engines.outsource.policies import open_record_policy

logger = logging.getLogger("fos.engines.outsource")


# ══════════════════════════════════════════════════════════════
# PURE TRANSITIONS
# ══════════════════════════════════════════════════════════════

def transition_outsource_state(
    record: OutsourceRecord,
    next_state: str,
    at: datetime,
    actor_id: Optional[str] = None,
    reason: str = "",
) -> OutsourceRecord:
    """
    Move the record to next_state, stamping the transition with `at`.

    The caller supplies the instant; OutsourceService.transition() takes
    it from its clock. Raises InvalidStateTransitionError for an
    undeclared or terminal move.
    """
    transition = OUTSOURCE_ORDER_WORKFLOW.transition(
        record.state, next_state, at, actor_id=actor_id, reason=reason,
    )
    return replace(record, state=next_state, history=record.history + (transition,))


def update_partner_price(record: OutsourceRecord, partner_price: int) -> OutsourceRecord:
    rejection = open_record_policy(record)
    if rejection is not None:
        raise ValidationError("partner_price", rejection.message)
    require_money(partner_price, "partner_price")
    return replace(record, partner_price=partner_price)


# ══════════════════════════════════════════════════════════════
# SERVICE
# ══════════════════════════════════════════════════════════════

class OutsourceService:
    """Partner-order lifecycle with a notification per state change."""

    def __init__(
        self,
        *,
        clock: Clock,
        subscribers: Optional[SubscriberRegistry] = None,
    ):
        self._clock = clock
        self._subscribers = subscribers

    def request(
        self,
        order_id: str,
        partner_name: str,
        order_total: int,
        partner_price: int,
        branch_name: str = "",
    ) -> OutsourceRecord:
        now = self._clock.now_utc()
        record = OutsourceRecord(
            order_id=order_id,
            partner_name=partner_name,
            order_total=order_total,
            partner_price=partner_price,
            outsourced_at=now,
            state=OUTSOURCE_PENDING,
            branch_name=branch_name,
        )
        publish(
            self._subscribers, event_type_for(OUTSOURCE_PENDING),
            build_outsource_payload(record), now,
        )
        logger.info(
            f"Order outsourced: {order_id} → {partner_name or UNNAMED_PARTNER} "
            f"(price={partner_price}, profit={record.profit})"
        )
        return record

    def transition(
        self,
        record: OutsourceRecord,
        next_state: str,
        actor_id: Optional[str] = None,
        reason: str = "",
    ) -> OutsourceRecord:
        now = self._clock.now_utc()
        updated = transition_outsource_state(record, next_state, now, actor_id, reason)
        publish(
            self._subscribers, event_type_for(next_state),
            build_outsource_payload(updated, from_state=record.state), now,
        )
        logger.info(f"Outsource {record.order_id}: {record.state} → {next_state}")
        return updated

    def change_partner_price(self, record: OutsourceRecord, partner_price: int) -> OutsourceRecord:
        updated = update_partner_price(record, partner_price)
        logger.info(
            f"Outsource {record.order_id}: partner price "
            f"{record.partner_price} → {partner_price}, profit {updated.profit}"
        )
        return updated


# ══════════════════════════════════════════════════════════════
# STATISTICS
# ══════════════════════════════════════════════════════════════

@dataclass
class PartnerStats:
    partner_name: str
    count: int = 0
    revenue: int = 0
    partner_price: int = 0
    profit: int = 0

    @property
    def margin_percent(self) -> float:
        """profit / revenue × 100, one decimal; 0 without revenue."""
        if self.revenue <= 0:
            return 0.0
        return round(self.profit / self.revenue * 100, 1)


def _in_period(record: OutsourceRecord, window: Optional[DateWindow]) -> bool:
    return window is None or window.contains(business_date(record.outsourced_at))


def partner_statistics(
    records: Iterable[OutsourceRecord],
    window: Optional[DateWindow] = None,
    branch_name: Optional[str] = None,
) -> List[PartnerStats]:
    """
    Per-partner totals, highest revenue first.

    Canceled orders are excluded. window filters on the outsourcing
    date (shop-local); branch_name keeps one branch.
    """
    stats: Dict[str, PartnerStats] = {}
    for r in records:
        if r.state == OUTSOURCE_CANCELED or not _in_period(r, window):
            continue
        if branch_name and r.branch_name != branch_name:
            continue
        name = r.partner_name or UNNAMED_PARTNER
        s = stats.setdefault(name, PartnerStats(partner_name=name))
        s.count += 1
        s.revenue += r.order_total
        s.partner_price += r.partner_price
        s.profit += r.profit
    return sorted(stats.values(), key=lambda s: s.revenue, reverse=True)


def outsource_totals(stats: Iterable[PartnerStats]) -> PartnerStats:
    """All partners folded into one line (partner_name "전체")."""
    total = PartnerStats(partner_name="전체")
    for s in stats:
        total.count += s.count
        total.revenue += s.revenue
        total.partner_price += s.partner_price
        total.profit += s.profit
    return total

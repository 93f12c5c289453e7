"""Order status timeline: lifecycle milestones merged with the status history."""

from dataclasses import dataclass
from datetime import datetime

from storefront.order.order import Milestone, Order
from storefront.utils.clock import as_utc

SYSTEM_ACTOR = "System"


@dataclass(frozen=True)
class TimelineEntry:
    status: str
    date: datetime
    by: str | None
    automated: bool


def build_timeline(order: Order, actor_names: dict | None = None) -> list[TimelineEntry]:
    """Milestones come from the order's timestamps (each only when set) and are
    flagged ``automated``. History entries name who made the change, falling
    back to ``System`` when nobody did. Sorted by date, oldest first.
    """
    actor_names = actor_names or {}
    milestones = [
        (Milestone.PLACED, order.created_at),
        (Milestone.PAID, order.paid_at if order.is_paid else None),
        (Milestone.DELIVERED, order.delivered_at if order.is_delivered else None),
        (Milestone.CANCELED, order.canceled_at if order.is_canceled else None),
    ]

    entries = [
        TimelineEntry(status=milestone.value, date=as_utc(at), by=None, automated=True)
        for milestone, at in milestones
        if at is not None
    ]
    for change in order.status_history:
        if change.changed_by:
            by = actor_names.get(str(change.changed_by), str(change.changed_by))
        else:
            by = SYSTEM_ACTOR
        entries.append(TimelineEntry(status=change.status, date=as_utc(change.changed_at), by=by, automated=False))

    return sorted(entries, key=lambda entry: entry.date)

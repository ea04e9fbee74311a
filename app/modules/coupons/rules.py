"""
Coupon status and code rules shared by every endpoint that shows or changes
a coupon.

The stored ``status`` column only changes on explicit user action, so a row
can stay ``active`` after its ``expires_at`` has passed. Everything that
displays or filters coupons goes through ``effective_status`` instead of
reading the column directly.
"""

import random
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import TypeAdapter

from app.config import settings

STATUS_ACTIVE = "active"
STATUS_USED = "used"
STATUS_EXPIRED = "expired"
COUPON_STATUSES = (STATUS_ACTIVE, STATUS_USED, STATUS_EXPIRED)

# Stored transitions a user may trigger
ALLOWED_TRANSITIONS = {
    STATUS_ACTIVE: {STATUS_USED, STATUS_EXPIRED},
    STATUS_USED: set(),
    STATUS_EXPIRED: set(),
}

DEFAULT_CODE_PREFIX = "COUPON"

_datetime_adapter = TypeAdapter(datetime)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = _datetime_adapter.validate_python(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Union[str, datetime, None], now: Optional[datetime] = None) -> bool:
    """A coupon without an expiry never expires."""
    expiry = parse_timestamp(expires_at)
    if expiry is None:
        return False
    return expiry < (now or utc_now())


def effective_status(coupon: Mapping[str, Any], now: Optional[datetime] = None) -> str:
    status = coupon.get("status") or STATUS_ACTIVE
    if status == STATUS_USED:
        return STATUS_USED
    if status == STATUS_EXPIRED or is_expired(coupon.get("expires_at"), now):
        return STATUS_EXPIRED
    return STATUS_ACTIVE


def status_filter(statuses: Iterable[str], now: Optional[datetime] = None) -> str:
    """PostgREST ``or`` filter selecting rows whose effective status is one
    of ``statuses``. Mirrors ``effective_status``."""
    moment = (now or utc_now()).isoformat()
    clauses = {
        STATUS_USED: ["status.eq.used"],
        STATUS_EXPIRED: ["status.eq.expired", f"and(status.eq.active,expires_at.lt.{moment})"],
        STATUS_ACTIVE: [f"and(status.eq.active,or(expires_at.is.null,expires_at.gte.{moment}))"],
    }
    parts = []
    for status in COUPON_STATUSES:
        if status in statuses:
            parts.extend(clauses[status])
    return ",".join(parts)


def seconds_remaining(coupon: Mapping[str, Any], now: Optional[datetime] = None) -> int:
    """Countdown shown on the public page; 0 unless the coupon is active."""
    now = now or utc_now()
    if effective_status(coupon, now) != STATUS_ACTIVE:
        return 0
    expiry = parse_timestamp(coupon.get("expires_at"))
    if expiry is None:
        return 0
    return max(0, int((expiry - now).total_seconds()))


def can_transition(coupon: Mapping[str, Any], target: str, now: Optional[datetime] = None) -> bool:
    """Only coupons that are still active may be marked used or expired.

    An overdue coupon may still be marked expired, which just persists what
    ``effective_status`` already reports.
    """
    current = effective_status(coupon, now)
    if current == STATUS_EXPIRED and target == STATUS_EXPIRED:
        return (coupon.get("status") or STATUS_ACTIVE) == STATUS_ACTIVE
    return target in ALLOWED_TRANSITIONS.get(current, set())


def code_prefix(product_name: Optional[str]) -> str:
    words = (product_name or "").split()
    if not words:
        return DEFAULT_CODE_PREFIX
    return words[0].upper()


def generate_coupon_code(product_name: Optional[str], discount_percent: int) -> str:
    """``{PREFIX}-OFF{discount}-{NNNN}``, e.g. ``HUAWEI-OFF15-4821``."""
    return f"{code_prefix(product_name)}-OFF{discount_percent}-{random.randint(1000, 9999)}"


def share_url(code: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/coupon/{code}"

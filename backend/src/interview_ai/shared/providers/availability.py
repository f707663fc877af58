"""Availability gate — decides whether a provider may be attempted.

Pure function of ``(now, record)``: no store access, no clock reads.  The
credit monitor feeds it persisted rows and writes back whatever it decides.

Order of evaluation:
    1. daily reset     (a full day since ``last_reset_daily``)
    2. monthly reset   (calendar month changed since ``last_reset_monthly``)
    3. limit checks on the post-reset counters
    4. exhausted       → status off, notice on the True → False edge
    5. reset happened  → status back on
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timedelta

from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.enums import ExhaustionReason
from interview_ai.domain.value_objects import ExhaustionNotice

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Result of evaluating one provider record at one instant."""

    record: ProviderRecord
    eligible: bool
    changed: bool
    reset_daily: bool = False
    reset_monthly: bool = False
    exhausted: ExhaustionNotice | None = None


def days_elapsed(now: datetime, since: datetime) -> int:
    return (now - since) // _ONE_DAY


def months_elapsed(now: datetime, since: datetime) -> int:
    """Calendar months between two instants; day-of-month is ignored."""
    return (now.year * 12 + now.month) - (since.year * 12 + since.month)


def exhaustion_reason(record: ProviderRecord) -> ExhaustionReason:
    """Why a provider is (or would be) exhausted.  Daily wins a tie."""
    if record.daily_exceeded:
        return ExhaustionReason.DAILY
    return ExhaustionReason.MONTHLY


def exhaustion_notice(record: ProviderRecord) -> ExhaustionNotice:
    """Describe the limit that took ``record`` out, reporting the counter behind it."""
    reason = exhaustion_reason(record)
    if reason == ExhaustionReason.DAILY:
        usage, limit = record.daily_usage, record.daily_limit
    else:
        usage, limit = record.monthly_usage, record.monthly_limit
    return ExhaustionNotice(
        codename=record.codename, reason=reason.value, usage=usage, limit=limit
    )


def evaluate(now: datetime, record: ProviderRecord) -> GateDecision:
    updated = record

    reset_daily = days_elapsed(now, record.last_reset_daily) >= 1
    if reset_daily:
        updated = dataclasses.replace(updated, daily_usage=0, last_reset_daily=now)

    reset_monthly = months_elapsed(now, record.last_reset_monthly) >= 1
    if reset_monthly:
        updated = dataclasses.replace(updated, monthly_usage=0, last_reset_monthly=now)

    notice: ExhaustionNotice | None = None
    if updated.is_exhausted:
        if record.credit_status:
            notice = exhaustion_notice(updated)
        updated = dataclasses.replace(updated, credit_status=False)
    elif not record.credit_status and (reset_daily or reset_monthly):
        updated = dataclasses.replace(updated, credit_status=True)

    changed = not updated.same_state(record)
    if changed:
        updated = dataclasses.replace(updated, last_checked=now)

    return GateDecision(
        record=updated,
        eligible=updated.credit_status,
        changed=changed,
        reset_daily=reset_daily,
        reset_monthly=reset_monthly,
        exhausted=notice,
    )

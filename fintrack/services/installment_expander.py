"""Split one entered transaction into monthly installment drafts."""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from fintrack.core.exceptions import ValidationException

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PostingDraft:
    """One posting of an installment group, before persistence."""

    amount: Decimal
    base_amount: Decimal
    date: date
    notes: str | None
    installments: int | None = None
    installment_number: int | None = None
    card_type: str | None = None


def add_months(start: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def installment_marker(number: int, count: int) -> str:
    return f"(Cuota {number}/{count})"


def expand(
    total_amount: Decimal,
    total_base_amount: Decimal,
    installment_count: int,
    start_date: date,
    notes: str | None = None,
    card_type: str | None = None,
) -> list[PostingDraft]:
    """
    Expand a transaction into installment_count drafts.

    Each draft gets total/N and base/N rounded to cents independently; the
    rounding remainder is not redistributed, so the group may drift from the
    total by up to one cent per draft. Draft i is dated start_date + i months.
    A single installment produces one draft with no installment metadata.

    Raises:
        ValidationException: If installment_count < 1
    """
    if installment_count < 1:
        raise ValidationException("Installment count must be at least 1")

    total_amount = Decimal(total_amount)
    total_base_amount = Decimal(total_base_amount)

    if installment_count == 1:
        return [
            PostingDraft(
                amount=total_amount.quantize(CENT, rounding=ROUND_HALF_UP),
                base_amount=total_base_amount.quantize(CENT, rounding=ROUND_HALF_UP),
                date=start_date,
                notes=notes,
            )
        ]

    amount = (total_amount / installment_count).quantize(CENT, rounding=ROUND_HALF_UP)
    base_amount = (total_base_amount / installment_count).quantize(CENT, rounding=ROUND_HALF_UP)

    drafts = []
    for index in range(installment_count):
        marker = installment_marker(index + 1, installment_count)
        drafts.append(
            PostingDraft(
                amount=amount,
                base_amount=base_amount,
                date=add_months(start_date, index),
                notes=f"{notes} {marker}" if notes else marker,
                installments=installment_count,
                installment_number=index + 1,
                card_type=card_type,
            )
        )
    return drafts

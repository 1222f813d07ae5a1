"""
Split-payment reconciler.

Payers declare how many points each contributes; the declared amounts
must add up to the payable total exactly. ``even_split`` is the register's
"split evenly" helper: floor shares with the whole remainder on the first
payer.
"""

from dataclasses import dataclass
from typing import List, Sequence
from uuid import UUID

from ..conf import camp_setting
from ..exceptions import (
    InvalidPayerError,
    NoPayersError,
    PaymentMismatchError,
    TooManyPayersError,
)


@dataclass(frozen=True)
class Payer:
    student_id: UUID
    amount: int


def validate_payers(payers: Sequence[Payer]) -> None:
    """
    Check the payer list shape.

    Raises:
        NoPayersError: Empty list
        TooManyPayersError: More than MAX_PAYERS
        InvalidPayerError: Student listed twice or negative amount
    """
    if not payers:
        raise NoPayersError()

    max_payers = camp_setting('MAX_PAYERS')
    if len(payers) > max_payers:
        raise TooManyPayersError(f"At most {max_payers} payers per order")

    seen = set()
    for payer in payers:
        if payer.student_id in seen:
            raise InvalidPayerError(f"Student {payer.student_id} listed twice")
        seen.add(payer.student_id)
        if payer.amount < 0:
            raise InvalidPayerError("Payment amounts cannot be negative")


def reconcile_split(payable_total: int, payers: Sequence[Payer]) -> None:
    """
    Verify the declared amounts cover the payable total exactly.

    Raises:
        NoPayersError, TooManyPayersError, InvalidPayerError
        PaymentMismatchError: Sum differs from payable_total
    """
    validate_payers(payers)
    declared = sum(payer.amount for payer in payers)
    if declared != payable_total:
        raise PaymentMismatchError(
            f"Payments total {declared} but order is {payable_total}"
        )


def even_split(payable_total: int, payer_ids: Sequence[UUID]) -> List[Payer]:
    """
    Split the payable total as evenly as possible.

    Every payer gets ``payable_total // n``; the first payer also takes the
    remainder.

    Example:
        even_split(50, [a, b, c]) -> a: 18, b: 16, c: 16
    """
    if not payer_ids:
        raise NoPayersError()

    count = len(payer_ids)
    base, remainder = divmod(max(0, payable_total), count)
    payers = [Payer(student_id=payer_id, amount=base) for payer_id in payer_ids]
    payers[0] = Payer(student_id=payer_ids[0], amount=base + remainder)
    validate_payers(payers)
    return payers

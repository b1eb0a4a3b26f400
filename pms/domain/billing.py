import math
from datetime import datetime
from typing import NamedTuple

from pms.domain.exceptions import ValidationError


class FeeQuote(NamedTuple):
    duration_minutes: int
    total_amount: float


def calculate_fee(entry_time: datetime, exit_time: datetime, fee_per_hour: float) -> FeeQuote:
    """Charge for a stay, billed per started minute at ``fee_per_hour``.

    No minimum charge and no rounding of the amount.
    """
    if exit_time < entry_time:
        raise ValidationError("Exit time cannot be before entry time")
    if fee_per_hour < 0:
        raise ValidationError("Hourly fee cannot be negative")

    duration_minutes = math.ceil((exit_time - entry_time).total_seconds() / 60)
    total_amount = (duration_minutes / 60) * fee_per_hour
    return FeeQuote(duration_minutes=duration_minutes, total_amount=total_amount)

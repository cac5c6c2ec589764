# src/transformers/urgency.py
"""Maps order age and tracking presence to an SLA urgency state."""
from typing import List, Tuple

from src.models.models import PrazoStatus, Urgency, UrgencyLevel

# (strictly greater than N days, state), checked top-down
NO_TRACKING_LADDER: List[Tuple[int, Urgency]] = [
    (7, Urgency(UrgencyLevel.CRITICAL, PrazoStatus.AGUARDANDO_URGENTE)),
    (3, Urgency(UrgencyLevel.MEDIUM, PrazoStatus.AGUARDANDO)),
]
NO_TRACKING_DEFAULT = Urgency(UrgencyLevel.NORMAL, PrazoStatus.AGUARDANDO)

TRACKING_LADDER: List[Tuple[int, Urgency]] = [
    (20, Urgency(UrgencyLevel.CRITICAL, PrazoStatus.CRITICO)),
    (15, Urgency(UrgencyLevel.HIGH, PrazoStatus.ATRASADO)),
    (12, Urgency(UrgencyLevel.MEDIUM, PrazoStatus.ALERTA)),
]
TRACKING_DEFAULT = Urgency(UrgencyLevel.NORMAL, PrazoStatus.NO_PRAZO)

DELIVERED = Urgency(UrgencyLevel.DELIVERED, PrazoStatus.DELIVERED)

LATE_AFTER_DAYS_WITH_TRACKING = 15
LATE_AFTER_DAYS_WITHOUT_TRACKING = 7


def classify_urgency(days_since_order: int, has_tracking: bool, is_delivered: bool = False) -> Urgency:
    if is_delivered:
        return DELIVERED

    if has_tracking:
        ladder, default = TRACKING_LADDER, TRACKING_DEFAULT
    else:
        ladder, default = NO_TRACKING_LADDER, NO_TRACKING_DEFAULT

    for threshold, state in ladder:
        if days_since_order > threshold:
            return state
    return default


def is_late(days_since_order: int, has_tracking: bool) -> bool:
    """Independent of the urgency ladder; its break points differ."""
    limit = LATE_AFTER_DAYS_WITH_TRACKING if has_tracking else LATE_AFTER_DAYS_WITHOUT_TRACKING
    return days_since_order > limit

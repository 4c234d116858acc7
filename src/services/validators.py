from datetime import datetime, timezone
from typing import Iterable, List, Optional

from src.core.exceptions import ValidationError

BOARD_NAME_MAX_LENGTH = 200
LIST_NAME_MAX_LENGTH = 100
CARD_TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


def require_text(value: Optional[str], field: str, max_length: int) -> str:
    """Non-blank text within the column limit, surrounding whitespace stripped"""
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} must not exceed {max_length} characters")
    return value


def optional_text(value: Optional[str], field: str, max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    if value is None:
        return ""
    if len(value) > max_length:
        raise ValidationError(f"{field} must not exceed {max_length} characters")
    return value


def normalize_labels(labels: Optional[Iterable[str]]) -> Optional[List[str]]:
    """Strip, drop blanks and keep the first occurrence of each label"""
    if labels is None:
        return None
    if isinstance(labels, str):
        # "a, b" -> ["a", "b"]
        labels = labels.split(",")
    normalized: List[str] = []
    for label in labels:
        label = str(label).strip()
        if label and label not in normalized:
            normalized.append(label)
    return normalized or None


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Columns are TIMESTAMP WITHOUT TIME ZONE, aware values are stored as UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

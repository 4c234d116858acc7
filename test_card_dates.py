import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError as SchemaValidationError

from src.schemas.card import CardDatesUpdate, CardStatusUpdate
from src.services.validators import normalize_labels, optional_text, require_text, to_naive_utc
from src.core.exceptions import ValidationError


class TestCardDatesUpdate:
    """Тесты преобразования дат с часовым поясом в naive datetime"""

    def test_utc_z_suffix(self):
        """ISO строка с UTC (Z) сохраняется без часового пояса"""
        dates = CardDatesUpdate(due_date='2025-05-29T20:59:59.000Z')

        assert dates.due_date == datetime(2025, 5, 29, 20, 59, 59)
        assert dates.due_date.tzinfo is None

    def test_offset_is_converted_to_utc(self):
        dates = CardDatesUpdate(start_date='2025-05-29T23:00:00+03:00')

        assert dates.start_date == datetime(2025, 5, 29, 20, 0)
        assert dates.start_date.tzinfo is None

    def test_naive_value_is_kept(self):
        dates = CardDatesUpdate(reminder_date='2025-05-29T08:30:00')

        assert dates.reminder_date == datetime(2025, 5, 29, 8, 30)

    def test_missing_dates_are_none(self):
        dates = CardDatesUpdate()

        assert dates.start_date is None
        assert dates.due_date is None
        assert dates.reminder_date is None

    def test_invalid_date_rejected(self):
        with pytest.raises(SchemaValidationError):
            CardDatesUpdate(due_date="not a date")


class TestValidators:
    """Тесты общих проверок полей"""

    def test_to_naive_utc(self):
        aware = datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert to_naive_utc(aware) == datetime(2025, 1, 1, 17, 0)
        assert to_naive_utc(None) is None

    def test_require_text_limit(self):
        assert require_text("x" * 100, "List name", 100) == "x" * 100
        with pytest.raises(ValidationError):
            require_text("x" * 101, "List name", 100)

    def test_optional_text(self):
        assert optional_text(None, "Description") == ""
        with pytest.raises(ValidationError):
            optional_text("x" * 2001, "Description")

    def test_labels_from_comma_separated_string(self):
        assert normalize_labels("sound, stage,,sound") == ["sound", "stage"]

    def test_empty_labels_become_none(self):
        assert normalize_labels([" ", ""]) is None

    def test_status_schema_rejects_unknown_value(self):
        with pytest.raises(SchemaValidationError):
            CardStatusUpdate(status="archived")

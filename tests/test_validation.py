from datetime import date

import pytest

from models.exceptions import ImportRecordError, ValidationError
from services.validation import parse_record, validate_form, validate_partial, validate_record


def _record(**overrides):
    record = {
        "id": "abc",
        "name": "Spotify",
        "amount": 21.99,
        "currency": "SAR",
        "frequency": "monthly",
        "nextPayment": "2024-07-01",
        "labels": ["music"],
        "autoRenewal": True,
        "createdAt": "2024-01-01T10:00:00+00:00",
        "updatedAt": "2024-02-01T10:00:00+00:00",
    }
    record.update(overrides)
    return record


class TestValidateForm:

    def test_valid_form_with_defaults(self):
        new = validate_form({"name": "  Netflix ", "amount": "45", "next_payment": "2024-07-01"})
        assert new.name == "Netflix"
        assert new.amount == 45.0
        assert new.currency == "SAR"
        assert new.frequency == "monthly"
        assert new.auto_renewal is True
        assert new.next_payment == date(2024, 7, 1)

    def test_labels_are_deduplicated_in_order(self):
        new = validate_form({
            "name": "Adobe", "amount": 20, "next_payment": "2024-07-01",
            "labels": "work, design, work, , design",
        })
        assert new.labels == ["work", "design"]

    def test_currency_and_frequency_are_normalized(self):
        new = validate_form({
            "name": "Adobe", "amount": 20, "next_payment": "2024-07-01",
            "currency": "usd", "frequency": "Yearly",
        })
        assert new.currency == "USD"
        assert new.frequency == "yearly"

    def test_collects_every_error(self):
        with pytest.raises(ValidationError) as exc:
            validate_form({"name": " ", "amount": "abc"})
        assert set(exc.value.errors) == {"name", "amount", "next_payment"}
        assert exc.value.field == "name"

    @pytest.mark.parametrize("amount", ["", "0", -5, 1_000_000, True, "nan", "0.001"])
    def test_rejects_bad_amounts(self, amount):
        with pytest.raises(ValidationError) as exc:
            validate_form({"name": "X", "amount": amount, "next_payment": "2024-07-01"})
        assert "amount" in exc.value.errors

    def test_accepts_upper_bound(self):
        assert validate_form({"name": "X", "amount": 999999, "next_payment": "2024-07-01"}).amount == 999999

    def test_amount_is_rounded_to_cents(self):
        assert validate_form({"name": "X", "amount": "9.999", "next_payment": "2024-07-01"}).amount == 10.0

    def test_rejects_trailing_text_after_date(self):
        with pytest.raises(ValidationError) as exc:
            validate_form({"name": "X", "amount": 1, "next_payment": "2030-01-01garbage"})
        assert set(exc.value.errors) == {"next_payment"}

    def test_rejects_bad_date_and_frequency(self):
        with pytest.raises(ValidationError) as exc:
            validate_form({"name": "X", "amount": 1, "next_payment": "07/01/2024", "frequency": "daily"})
        assert set(exc.value.errors) == {"next_payment", "frequency"}

    def test_rejects_unsupported_currency(self):
        with pytest.raises(ValidationError) as exc:
            validate_form({"name": "X", "amount": 1, "next_payment": "2024-07-01", "currency": "JPY"})
        assert exc.value.field == "currency"


class TestValidatePartial:

    def test_only_present_fields_are_checked(self):
        assert validate_partial({"amount": "12.5"}) == {"amount": 12.5}

    def test_read_only_fields_are_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_partial({"id": "other", "created_at": "x"})
        assert set(exc.value.errors) == {"id", "created_at"}

    def test_auto_renewal_must_be_boolean(self):
        with pytest.raises(ValidationError):
            validate_partial({"auto_renewal": "maybe"})


class TestParseRecord:

    def test_valid_record(self):
        sub = parse_record(_record(labels=["music", "music", " fun "]), 0)
        assert sub.id == "abc"
        assert sub.next_payment == date(2024, 7, 1)
        assert sub.labels == ["music", "fun"]
        assert sub.created_at.year == 2024

    @pytest.mark.parametrize("overrides", [
        {"amount": "21.99"},
        {"amount": True},
        {"labels": "music"},
        {"labels": ["ok", 3]},
        {"autoRenewal": "yes"},
        {"frequency": "daily"},
        {"nextPayment": "not-a-date"},
        {"amount": 0},
        {"amount": 0.004},
        {"id": ""},
        {"id": "   "},
        {"nextPayment": "2030-01-01garbage"},
        {"startDate": "2024-01-01junk"},
    ])
    def test_invalid_records(self, overrides):
        with pytest.raises(ImportRecordError) as exc:
            parse_record(_record(**overrides), 4)
        assert str(exc.value) == "Invalid subscription data at index 4"

    def test_missing_key(self):
        raw = _record()
        del raw["updatedAt"]
        assert validate_record(raw) is False

    def test_non_object(self):
        assert validate_record(["not", "a", "record"]) is False
        assert validate_record(_record()) is True

    def test_full_iso_datetime_keeps_the_date(self):
        sub = parse_record(_record(nextPayment="2024-07-01T00:00:00Z", amount=9.999), 0)
        assert sub.next_payment == date(2024, 7, 1)
        assert sub.amount == 10.0

"""
Unit tests for API request and response models.
"""

import pytest
from pydantic import ValidationError

from src.api.models import ConflictReport, RegistrationFields, RegistrationWebhook
from src.domain.classifier import aggregate


class TestRegistrationWebhook:
    def test_fields_dict_uses_first_embed(self) -> None:
        webhook = RegistrationWebhook(
            channel_id="1",
            message_id="2",
            embeds=[
                {"fields": [{"name": "discordId", "value": "111"}]},
                {"fields": [{"name": "discordId", "value": "999"}]},
            ],
        )

        assert webhook.fields_dict() == {"discordId": "111"}

    def test_fields_dict_without_embeds(self) -> None:
        webhook = RegistrationWebhook(channel_id="1", message_id="2")

        assert webhook.fields_dict() == {}

    def test_requires_message_id(self) -> None:
        with pytest.raises(ValidationError):
            RegistrationWebhook(channel_id="1")


class TestRegistrationFields:
    def _fields(self, **overrides: str) -> dict:
        fields = {
            "discordId": "111",
            "studentCode": "20200001",
            "gmail": "alice@gmail.com",
            "fullName": "Alice Quispe",
            "base": "20",
        }
        fields.update(overrides)
        return fields

    def test_to_record(self) -> None:
        record = RegistrationFields.model_validate(self._fields()).to_record()

        assert record.discord_id == "111"
        assert record.student_code == "20200001"
        assert record.full_name == "Alice Quispe"
        assert record.base == 20
        assert record.created_at is None

    def test_accepts_lowercase_fullname(self) -> None:
        fields = self._fields()
        fields["fullname"] = fields.pop("fullName")

        assert RegistrationFields.model_validate(fields).full_name == "Alice Quispe"

    def test_strips_whitespace(self) -> None:
        fields = RegistrationFields.model_validate(self._fields(studentCode="  20200001 "))

        assert fields.student_code == "20200001"

    def test_rejects_invalid_gmail(self) -> None:
        with pytest.raises(ValidationError):
            RegistrationFields.model_validate(self._fields(gmail="alice"))

    def test_rejects_empty_discord_id(self) -> None:
        with pytest.raises(ValidationError):
            RegistrationFields.model_validate(self._fields(discordId=""))


class TestConflictReport:
    def test_from_conflict(self, record, record_factory) -> None:
        conflict = aggregate(record, [record_factory(student_code="20189999")]).conflicts[0]

        report = ConflictReport.from_conflict(conflict)

        assert report.classification == "already_registered_impersonation"
        assert report.student_code == "20189999"
        assert report.reason == conflict.reason

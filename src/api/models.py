"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from src.domain.classifier import CandidateConflict
from src.domain.models import RegistrationRecord


class EmbedField(BaseModel):
    """One name/value field of a webhook embed."""

    name: str
    value: str


class WebhookEmbed(BaseModel):
    """Embed attached to a webhook message."""

    fields: list[EmbedField] = Field(default_factory=list)


class RegistrationWebhook(BaseModel):
    """Webhook message posted by the registration form."""

    channel_id: str = Field(..., min_length=1)
    message_id: str = Field(..., min_length=1)
    webhook_id: str | None = None
    content: str = ""
    embeds: list[WebhookEmbed] = Field(default_factory=list)

    def fields_dict(self) -> dict[str, str]:
        """Form fields of the first embed, keyed by field name."""
        if not self.embeds:
            return {}
        return {field.name: field.value for field in self.embeds[0].fields}


class RegistrationFields(BaseModel):
    """Validated registration form fields."""

    model_config = ConfigDict(str_strip_whitespace=True)

    discord_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("discordId", "discord_id")
    )
    student_code: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("studentCode", "student_code")
    )
    gmail: EmailStr
    full_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("fullName", "fullname", "full_name")
    )
    base: int = Field(..., description="Cohort year")

    def to_record(self) -> RegistrationRecord:
        return RegistrationRecord(
            discord_id=self.discord_id,
            student_code=self.student_code,
            gmail=self.gmail,
            full_name=self.full_name,
            base=self.base,
        )


class ConflictReport(BaseModel):
    """An existing record that conflicts with the submission."""

    classification: str
    reason: str
    discord_id: str
    student_code: str
    gmail: str
    full_name: str
    base: int

    @classmethod
    def from_conflict(cls, conflict: CandidateConflict) -> "ConflictReport":
        record = conflict.candidate
        return cls(
            classification=conflict.classification.value,
            reason=conflict.reason,
            discord_id=record.discord_id,
            student_code=record.student_code,
            gmail=record.gmail,
            full_name=record.full_name,
            base=record.base,
        )


class RegistrationResponse(BaseModel):
    """Response model for a received registration webhook."""

    message: str
    outcome: str | None = None
    signal: str | None = None
    inconsistent: bool = False
    conflicts: list[ConflictReport] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str

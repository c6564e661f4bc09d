"""
API v1 routes.

Defines the REST endpoint receiving registration webhooks.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import ValidationError

from src.api.dependencies import get_effect_dispatcher, get_registration_workflow
from src.api.models import (
    ConflictReport,
    ErrorResponse,
    RegistrationFields,
    RegistrationResponse,
    RegistrationWebhook,
)
from src.config.settings import Settings, get_settings
from src.domain.dispatch import EffectDispatcher
from src.domain.exceptions import PersistenceError
from src.domain.models import SourceMessage
from src.domain.registration import RegistrationWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


@router.post(
    "/registrations",
    response_model=RegistrationResponse,
    responses={
        202: {"model": RegistrationResponse, "description": "Not a registration message"},
        422: {"model": ErrorResponse, "description": "Invalid registration fields"},
        503: {"model": ErrorResponse, "description": "Record store unavailable"},
    },
    summary="Process a registration webhook",
    description="Receives the message posted by the registration form webhook, "
    "verifies the member or reports conflicting registrations to moderators.",
)
def submit_registration(
    webhook: RegistrationWebhook,
    response: Response,
    settings: Settings = Depends(get_settings),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
    dispatcher: EffectDispatcher = Depends(get_effect_dispatcher),
) -> RegistrationResponse:
    """
    Run the registration workflow for a webhook message.

    Messages not sent by a webhook, or without the registration marker as
    content, are ignored.
    """
    if webhook.webhook_id is None or webhook.content != settings.registration_marker:
        response.status_code = status.HTTP_202_ACCEPTED
        return RegistrationResponse(message="Ignored")

    try:
        fields = RegistrationFields.model_validate(webhook.fields_dict())
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise HTTPException(
            status_code=422,
            detail=f"Invalid registration fields: {detail}",
        ) from None

    try:
        result = workflow.run(fields.to_record())
    except PersistenceError:
        logger.exception("Candidate lookup failed for %s", fields.discord_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Record store unavailable",
        ) from None

    source = SourceMessage(channel_id=webhook.channel_id, message_id=webhook.message_id)
    feedback = dispatcher.dispatch(source, result)

    return RegistrationResponse(
        message="Registration processed",
        outcome=result.outcome.value,
        signal=feedback.signal.value,
        inconsistent=result.inconsistent,
        conflicts=[ConflictReport.from_conflict(conflict) for conflict in result.conflicts],
    )

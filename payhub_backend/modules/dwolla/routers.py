"""Dwolla webhook endpoint."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.logging import get_logger
from ...database import get_db
from ..commons import BaseResponse
from .client import DwollaClient, get_dwolla_client
from .webhooks import SIGNATURE_HEADER, WebhookOutcome, process_event, verify_signature

logger = get_logger(__name__)

router = APIRouter(prefix="/dwolla", tags=["Dwolla"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
Dwolla = Annotated[DwollaClient, Depends(get_dwolla_client)]


def _response(outcome: WebhookOutcome) -> BaseResponse[dict]:
    return BaseResponse(success=True, data={"outcome": outcome.value})


@router.post("/events", response_model=BaseResponse[dict])
async def receive_event(request: Request, db: DbSession, client: Dwolla):
    """
    Receive a Dwolla webhook.

    Always answers 200 so Dwolla does not redeliver; the outcome tells what
    happened to the event.
    """
    body = await request.body()
    if not verify_signature(
        client.webhook_secret, body, request.headers.get(SIGNATURE_HEADER)
    ):
        logger.warning("Rejected Dwolla webhook with an invalid signature")
        return _response(WebhookOutcome.INVALID_SIGNATURE)

    try:
        raw = json.loads(body)
        outcome = await process_event(db, client, raw)
    except Exception:
        logger.exception("Failed to process Dwolla webhook")
        await db.rollback()
        outcome = WebhookOutcome.FAILED
    return _response(outcome)

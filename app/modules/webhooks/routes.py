from fastapi import APIRouter, Depends, Form
from fastapi.responses import PlainTextResponse
from app.core.errors import ValidationError
from app.core.rate_limit import limiter
from app.database.supabase_client import get_admin_supabase
from app.modules.webhooks.schemas import WebhookAck
from app.modules.webhooks.service import WebhookService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/webhooks/plivo", tags=["webhooks"])


def get_webhook_service(supabase: Client = Depends(get_admin_supabase)) -> WebhookService:
    return WebhookService(supabase)


def _require(**fields):
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(
            "Missing required fields",
            details=[{"field": name, "message": "Field required"} for name in missing],
        )


@router.post("/status", response_model=WebhookAck)
@limiter.exempt
async def call_status(
    CallUUID: Optional[str] = Form(None),
    CallStatus: Optional[str] = Form(None),
    Duration: Optional[str] = Form(None),
    service: WebhookService = Depends(get_webhook_service)
):
    """Call progress updates from the telephony provider"""
    _require(CallUUID=CallUUID)
    service.record_status(CallUUID, CallStatus, Duration)
    return WebhookAck()


@router.post("/recording", response_model=WebhookAck)
@limiter.exempt
async def recording_available(
    CallUUID: Optional[str] = Form(None),
    RecordUrl: Optional[str] = Form(None),
    RecordingDuration: Optional[str] = Form(None),
    RecordingFormat: Optional[str] = Form(None),
    service: WebhookService = Depends(get_webhook_service)
):
    _require(CallUUID=CallUUID, RecordUrl=RecordUrl)
    service.record_recording(CallUUID, RecordUrl, RecordingDuration, RecordingFormat)
    return WebhookAck()


@router.post("/hangup", response_model=WebhookAck)
@limiter.exempt
async def call_hangup(
    CallUUID: Optional[str] = Form(None),
    HangupCause: Optional[str] = Form(None),
    Duration: Optional[str] = Form(None),
    BillDuration: Optional[str] = Form(None),
    service: WebhookService = Depends(get_webhook_service)
):
    """Final status for a call; also moves the linked lead along"""
    _require(CallUUID=CallUUID)
    service.record_hangup(CallUUID, HangupCause, Duration, BillDuration)
    return WebhookAck()


@router.post("/stream-status", response_class=PlainTextResponse)
@limiter.exempt
async def stream_status(
    Event: Optional[str] = Form(None),
    CallUUID: Optional[str] = Form(None),
    StreamID: Optional[str] = Form(None),
    service: WebhookService = Depends(get_webhook_service)
):
    service.record_stream_event(Event, CallUUID, StreamID)
    return "OK"

import logging
from datetime import datetime, timezone
from supabase import Client
from app.core.errors import ServerError
from app.database.supabase_client import first_row
from app.modules.webhooks.status_map import map_call_status, map_hangup_cause
from typing import Optional

logger = logging.getLogger(__name__)

STREAM_EVENT_LEVELS = {
    "StartStream": logging.INFO,
    "StopStream": logging.INFO,
    "DroppedStream": logging.ERROR,
    "DegradedStream": logging.WARNING,
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class WebhookService:
    """Applies telephony provider callbacks to call logs and leads"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record_status(self, call_sid: str, call_status: Optional[str], duration: Optional[str]):
        mapped = map_call_status(call_status)
        logger.info(f"Call status update {call_sid}: {call_status} -> {mapped}")
        try:
            self.supabase.table("call_logs").update({
                "call_status": mapped,
                "duration": _to_int(duration),
                "metadata": {"plivo_status": call_status, "last_update": _now()},
            }).eq("call_sid", call_sid).execute()
        except Exception as e:
            logger.error(f"Error updating call status for {call_sid}: {e}")

    def record_recording(
        self,
        call_sid: str,
        recording_url: str,
        recording_duration: Optional[str],
        recording_format: Optional[str]
    ):
        try:
            self.supabase.table("call_logs").update({
                "recording_url": recording_url,
                "recording_duration": _to_int(recording_duration),
                "recording_format": recording_format or "mp3",
            }).eq("call_sid", call_sid).execute()
        except Exception as e:
            logger.error(f"Error saving recording for {call_sid}: {e}")
            raise ServerError("Failed to save recording")
        logger.info(f"Recording saved for {call_sid}")

    def record_hangup(
        self,
        call_sid: str,
        hangup_cause: Optional[str],
        duration: Optional[str],
        bill_duration: Optional[str]
    ):
        """Close out the call log, creating one for calls that were never answered"""
        total = _to_int(duration)
        billed = _to_int(bill_duration)
        metadata = {"hangup_cause": hangup_cause, "total_duration": total, "bill_duration": billed}
        logger.info(f"Call hangup {call_sid}: {hangup_cause} ({total}s)")

        try:
            existing = first_row(self.supabase.table("call_logs").select("*").eq("call_sid", call_sid))
            if existing:
                self.supabase.table("call_logs").update({
                    "duration": billed,
                    "call_status": map_hangup_cause(hangup_cause, existing_log=True),
                    "notes": f"Call ended: {hangup_cause}",
                    "ended_at": _now(),
                    "metadata": metadata,
                }).eq("call_sid", call_sid).execute()
                if existing.get("lead_id"):
                    self._update_lead_after_call(existing["lead_id"], hangup_cause)
            else:
                logger.warning(f"No call log found for {call_sid}, creating one for unanswered call")
                self.supabase.table("call_logs").insert({
                    "call_sid": call_sid,
                    "duration": billed,
                    "call_status": map_hangup_cause(hangup_cause, existing_log=False),
                    "notes": f"Unanswered call: {hangup_cause}",
                    "created_at": _now(),
                    "ended_at": _now(),
                    "metadata": {**metadata, "unanswered": True},
                }).execute()
        except Exception as e:
            logger.error(f"Error recording hangup for {call_sid}: {e}")

    def _update_lead_after_call(self, lead_id: str, hangup_cause: Optional[str]):
        if hangup_cause == "NORMAL_CLEARING":
            self.supabase.table("leads")\
                .update({"status": "contacted", "call_status": "called"})\
                .eq("id", lead_id)\
                .neq("status", "transferred")\
                .neq("status", "converted")\
                .execute()
        elif hangup_cause in ("NO_ANSWER", "USER_BUSY"):
            self.supabase.table("leads")\
                .update({
                    "call_status": map_hangup_cause(hangup_cause),
                    "last_call_attempt": _now(),
                })\
                .eq("id", lead_id)\
                .execute()

    def record_stream_event(self, event: Optional[str], call_sid: Optional[str], stream_id: Optional[str]):
        level = STREAM_EVENT_LEVELS.get(event, logging.INFO)
        logger.log(level, f"[{call_sid}] Stream event {event} (stream {stream_id})")

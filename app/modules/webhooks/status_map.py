from typing import Optional

# Provider call status -> internal call_status
CALL_STATUS_MAP = {
    "ringing": "ringing",
    "in-progress": "in_progress",
    "completed": "completed",
    "busy": "no_answer",
    "no-answer": "no_answer",
    "failed": "failed",
    "canceled": "failed",
}

HANGUP_CAUSE_MAP = {
    "NORMAL_CLEARING": "called",
    "NO_ANSWER": "no_answer",
    "USER_BUSY": "busy",
}


def map_call_status(vendor_status: Optional[str]) -> Optional[str]:
    """Translate a provider status; anything not in the table is returned unchanged"""
    if vendor_status is None:
        return None
    return CALL_STATUS_MAP.get(vendor_status, vendor_status)


def map_hangup_cause(cause: Optional[str], existing_log: bool = True) -> str:
    # CANCEL only happens before a log exists (the call was never answered)
    if not existing_log and cause == "CANCEL":
        return "cancelled"
    if existing_log and cause == "NORMAL_CLEARING":
        return "called"
    if cause in ("NO_ANSWER", "USER_BUSY"):
        return HANGUP_CAUSE_MAP[cause]
    return "failed"

from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class CallLogResponse(BaseModel):
    id: str
    organization_id: Optional[str] = None
    lead_id: Optional[str] = None
    call_sid: Optional[str] = None
    call_status: Optional[str] = None
    duration: Optional[int] = 0
    recording_url: Optional[str] = None
    recording_duration: Optional[int] = None
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    class Config:
        from_attributes = True

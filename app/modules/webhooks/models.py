# Telephony provider callbacks
# Webhooks write to the call_logs and leads tables (see app/modules/call_logs/models.py
# and app/modules/leads/models.py); they own no tables of their own.

"""
Form fields posted by the provider:

status:        CallUUID (required), CallStatus, Duration
recording:     CallUUID (required), RecordUrl (required), RecordingDuration, RecordingFormat
hangup:        CallUUID (required), HangupCause, Duration, BillDuration
stream-status: Event, CallUUID, StreamID
"""

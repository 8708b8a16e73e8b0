"""
PesaRelay Webhook Receiver
Acknowledge Daraja payment notifications (STK callbacks and C2B confirmations)

The gateway retries any notification that is not acknowledged quickly, so
the acknowledgement never depends on the payload. Payloads are logged, not
stored, and their authenticity is not verified.
"""

import json
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LOG_PREVIEW_CHARS = 1000
ACKNOWLEDGEMENT = {"ResultCode": 0, "ResultDesc": "Accepted"}


class CallbackKind(str, Enum):
    """Notification shapes the gateway sends."""
    STK = "stk_callback"
    C2B = "c2b"
    UNKNOWN = "unknown"


@dataclass
class CallbackSummary:
    """The identifying fields of a notification, for logging."""
    kind: CallbackKind
    reference: Optional[str] = None
    result_code: Optional[Any] = None

    def to_dict(self) -> dict:
        return asdict(self)


def summarize(payload: Any) -> CallbackSummary:
    """Classify a notification without validating it."""
    if not isinstance(payload, dict):
        return CallbackSummary(kind=CallbackKind.UNKNOWN)

    body = payload.get("Body")
    if isinstance(body, dict) and isinstance(body.get("stkCallback"), dict):
        stk = body["stkCallback"]
        return CallbackSummary(
            kind=CallbackKind.STK,
            reference=stk.get("CheckoutRequestID"),
            result_code=stk.get("ResultCode"),
        )

    if "TransID" in payload:
        return CallbackSummary(kind=CallbackKind.C2B, reference=payload.get("TransID"))

    return CallbackSummary(kind=CallbackKind.UNKNOWN)


def preview(payload: Any, limit: int = LOG_PREVIEW_CHARS) -> str:
    """JSON rendering of ``payload`` cut to ``limit`` characters."""
    try:
        text = json.dumps(payload)
    except (TypeError, ValueError):
        text = repr(payload)
    return text[:limit]


class CallbackReceiver:
    """
    Receives gateway notifications.

    Usage:
        receiver = CallbackReceiver()
        ack = receiver.receive(payload)  # always the fixed acknowledgement
    """

    def __init__(self, preview_chars: int = LOG_PREVIEW_CHARS):
        self.preview_chars = preview_chars

    def receive(self, payload: Any) -> Dict[str, Any]:
        try:
            summary = summarize(payload)
            logger.info(
                "Callback received (%s ref=%s result=%s): %s",
                summary.kind.value,
                summary.reference,
                summary.result_code,
                preview(payload, self.preview_chars),
            )
        except Exception:
            logger.exception("Failed to log callback payload")
        return dict(ACKNOWLEDGEMENT)

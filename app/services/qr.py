"""QR payloads for tickets.

A ticket's QR code encodes the plain text ``event:<eventId>|ticket:<ticketId>``.
The event segment ties the code to one event, so a ticket id lifted from one
event's code cannot be replayed against another.
"""
from dataclasses import dataclass
import base64
import io
import re
import uuid

import qrcode

from app.config import settings
from app.models import MAX_ROW_ID
from app.services.exceptions import InvalidQrFormat

_UUID = r"[0-9a-fA-F]{8}-(?:[0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}"
_PAYLOAD_RE = re.compile(rf"^event:(?P<event_id>[0-9]{{1,19}})\|ticket:(?P<ticket_id>{_UUID})$")


@dataclass(frozen=True)
class QrPayload:
    event_id: int
    ticket_id: str

    def __str__(self) -> str:
        return build_payload(self.event_id, self.ticket_id)


def build_payload(event_id: int, ticket_id: str) -> str:
    return f"event:{event_id}|ticket:{ticket_id}"


def parse_payload(raw: str) -> QrPayload:
    if not isinstance(raw, str):
        raise InvalidQrFormat()
    match = _PAYLOAD_RE.match(raw.strip())
    if match is None:
        raise InvalidQrFormat()
    event_id = int(match.group("event_id"))
    if not 1 <= event_id <= MAX_ROW_ID:
        raise InvalidQrFormat("Invalid QR code format: event segment is out of range.")
    return QrPayload(event_id=event_id, ticket_id=str(uuid.UUID(match.group("ticket_id"))))


def render_data_uri(data: str, box_size: int | None = None, border: int | None = None) -> str:
    """Encode ``data`` as a PNG QR code and return it as a data URI."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size or settings.QR_BOX_SIZE,
        border=settings.QR_BORDER if border is None else border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"

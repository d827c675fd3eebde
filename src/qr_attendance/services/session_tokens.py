from __future__ import annotations

import base64
import io
import json
import logging
from datetime import datetime
from typing import Callable

import qrcode
from qrcode.image.pil import PilImage

from qr_attendance.models import IssuedToken, SessionDescriptor
from qr_attendance.services.errors import ValidationError, require_text
from qr_attendance.utils import InvalidDate, parse_iso_date

logger = logging.getLogger(__name__)


def render_qr_data_url(payload: str, *, box_size: int = 10, border: int = 4) -> str:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    image = qr.make_image(image_factory=PilImage, fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def parse_descriptor(payload: str) -> SessionDescriptor:
    """Decode a scanned token payload back into a descriptor."""

    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Scanned code is not a valid session token.") from exc

    if not isinstance(data, dict):
        raise ValidationError("Scanned code is not a valid session token.")

    return validate_descriptor(
        SessionDescriptor(
            subject=data.get("subject"),
            class_name=data.get("class"),
            date=data.get("date"),
        )
    )


def validate_descriptor(descriptor: SessionDescriptor) -> SessionDescriptor:
    subject = require_text(descriptor.subject, "subject")
    class_name = require_text(descriptor.class_name, "class name")
    day = require_text(descriptor.date, "date")
    try:
        day = parse_iso_date(day).isoformat()
    except InvalidDate as exc:
        raise ValidationError(str(exc)) from exc
    return SessionDescriptor(subject=subject, class_name=class_name, date=day)


class SessionTokenGenerator:
    """Issues stateless session tokens; nothing about issuance is stored."""

    def __init__(
        self,
        *,
        box_size: int = 10,
        border: int = 4,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._box_size = box_size
        self._border = border
        self._clock = clock

    def issue(self, subject: str, class_name: str) -> IssuedToken:
        subject = require_text(subject, "subject")
        class_name = require_text(class_name, "class name")

        descriptor = SessionDescriptor.for_day(subject, class_name, self._clock().date())
        token = render_qr_data_url(
            descriptor.to_payload(), box_size=self._box_size, border=self._border
        )
        logger.info(
            "Issued session token for %s / %s on %s",
            descriptor.subject,
            descriptor.class_name,
            descriptor.date,
        )
        return IssuedToken(token=token, descriptor=descriptor)

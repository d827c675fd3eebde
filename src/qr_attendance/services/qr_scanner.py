from __future__ import annotations

import logging
import threading
import time
import unicodedata
from contextlib import suppress
from pathlib import Path
from typing import Any, Callable, Optional

from PIL import Image

from qr_attendance.models import SessionDescriptor
from qr_attendance.services.errors import ValidationError
from qr_attendance.services.session_tokens import parse_descriptor

logger = logging.getLogger(__name__)

SCAN_INTERVAL_SECONDS = 0.1
DEDUP_INTERVAL_SECONDS = 3.0


def _decode_symbol_data(raw: bytes | str) -> str:
    if not raw:
        return ""

    if isinstance(raw, str):
        decoded = raw
    else:
        try:
            decoded = raw.decode("utf-8")
        except UnicodeDecodeError:
            decoded = raw.decode("utf-8", errors="ignore")

    return unicodedata.normalize("NFC", decoded).strip()


def descriptors_from_payloads(payloads: list[bytes | str]) -> list[SessionDescriptor]:
    """Parse decoded QR payloads, skipping anything that is not a session token."""

    descriptors: list[SessionDescriptor] = []
    for raw in payloads:
        payload = _decode_symbol_data(raw)
        if not payload:
            continue
        try:
            descriptor = parse_descriptor(payload)
        except ValidationError as exc:
            logger.debug("Ignoring QR payload %r: %s", payload, exc)
            continue
        if descriptor not in descriptors:
            descriptors.append(descriptor)
    return descriptors


def decode_image(source: str | Path | Image.Image) -> list[SessionDescriptor]:
    """Read session descriptors from a still image, e.g. a photo of the teacher's screen."""

    from pyzbar import pyzbar

    image = source if isinstance(source, Image.Image) else Image.open(source)
    symbols = pyzbar.decode(image.convert("L"), symbols=[pyzbar.ZBarSymbol.QRCODE])
    return descriptors_from_payloads([symbol.data for symbol in symbols])


class DescriptorDebouncer:
    """Drops a descriptor seen again within ``interval`` seconds."""

    def __init__(self, interval: float = DEDUP_INTERVAL_SECONDS) -> None:
        self._interval = interval
        self._last: Optional[SessionDescriptor] = None
        self._last_seen = 0.0

    def accept(self, descriptor: SessionDescriptor, now: float) -> bool:
        if self._last == descriptor and (now - self._last_seen) < self._interval:
            return False
        self._last = descriptor
        self._last_seen = now
        return True


class QRScanner:
    """Background camera loop that hands each newly scanned descriptor to a callback."""

    def __init__(self, camera_index: int = 0) -> None:
        self._camera_index = camera_index
        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def start(
        self,
        on_descriptor: Callable[[SessionDescriptor], None],
        *,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> bool:
        with self._lock:
            if self._running:
                return True

            try:
                import cv2  # type: ignore[import-not-found]
                from pyzbar import pyzbar
            except ImportError:
                if on_error:
                    on_error("Missing QR scanner dependencies. Install opencv-python and pyzbar to enable scanning.")
                return False

            self._stop_event.clear()

            def _runner() -> None:
                self._run_loop(on_descriptor, on_error, cv2, pyzbar)

            self._thread = threading.Thread(target=_runner, daemon=True)
            self._running = True
            self._thread.start()
            return True

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.5)
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._running

    def _run_loop(
        self,
        on_descriptor: Callable[[SessionDescriptor], None],
        on_error: Optional[Callable[[str], None]],
        cv2_module: Any,
        pyzbar_module: Any,
    ) -> None:
        capture = None
        debouncer = DescriptorDebouncer()

        try:
            capture = self._open_capture(cv2_module, on_error)
            if capture is None:
                return

            while not self._stop_event.is_set():
                ok, frame = capture.read()
                if not ok:
                    time.sleep(SCAN_INTERVAL_SECONDS)
                    continue

                gray = cv2_module.cvtColor(frame, cv2_module.COLOR_BGR2GRAY)
                symbols = pyzbar_module.decode(gray, symbols=[pyzbar_module.ZBarSymbol.QRCODE])
                now = time.monotonic()

                for descriptor in descriptors_from_payloads([symbol.data for symbol in symbols]):
                    if not debouncer.accept(descriptor, now):
                        continue
                    try:
                        on_descriptor(descriptor)
                    except Exception:  # pragma: no cover - a failing callback must not stop the camera
                        logger.exception("Scanner callback failed for %s", descriptor)

                time.sleep(SCAN_INTERVAL_SECONDS)
        finally:
            if capture is not None:
                with suppress(Exception):
                    capture.release()
            self._stop_event.clear()
            with self._lock:
                self._running = False

    def _open_capture(self, cv2_module: Any, on_error: Optional[Callable[[str], None]]):
        capture = cv2_module.VideoCapture(self._camera_index)
        if capture.isOpened():
            return capture

        capture.release()
        if on_error:
            on_error("Unable to access the camera. Check that it is connected and not used by another app.")
        return None

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from qr_attendance.models import SessionDescriptor
from qr_attendance.services import decode_image, render_qr_data_url
from qr_attendance.services.qr_scanner import DescriptorDebouncer, descriptors_from_payloads

MATH = SessionDescriptor(subject="Math", class_name="ClassA", date="2024-01-10")


def test_descriptors_from_payloads_skips_foreign_codes() -> None:
    payloads = [
        b"https://example.com/menu",
        MATH.to_payload().encode("utf-8"),
        b"",
        "  " + MATH.to_payload() + "\n",
    ]

    assert descriptors_from_payloads(payloads) == [MATH]


def test_debouncer_drops_repeats_inside_interval() -> None:
    debouncer = DescriptorDebouncer(interval=3.0)
    physics = SessionDescriptor(subject="Physics", class_name="ClassA", date="2024-01-10")

    assert debouncer.accept(MATH, now=10.0)
    assert not debouncer.accept(MATH, now=11.0)
    assert debouncer.accept(physics, now=11.5)
    assert debouncer.accept(MATH, now=12.0)
    assert debouncer.accept(MATH, now=15.5)


def test_decode_image_reads_issued_token() -> None:
    pytest.importorskip("pyzbar.pyzbar")

    data_url = render_qr_data_url(MATH.to_payload())
    image = Image.open(io.BytesIO(base64.b64decode(data_url.split(",", 1)[1])))

    assert decode_image(image) == [MATH]


class _FakeCapture:
    def __init__(self, frames: int) -> None:
        self._frames = frames
        self.released = False

    def isOpened(self) -> bool:
        return True

    def read(self):
        if self._frames <= 0:
            return False, None
        self._frames -= 1
        return True, "frame"

    def release(self) -> None:
        self.released = True


class _FakeCv2:
    COLOR_BGR2GRAY = 6

    def __init__(self, capture: _FakeCapture) -> None:
        self._capture = capture

    def VideoCapture(self, index):
        return self._capture

    def cvtColor(self, frame, code):
        return frame


class _FakeSymbol:
    def __init__(self, data: bytes) -> None:
        self.data = data


class _FakePyzbar:
    class ZBarSymbol:
        QRCODE = 64

    def decode(self, image, symbols=None):
        return [_FakeSymbol(MATH.to_payload().encode("utf-8"))]


def test_scanner_loop_delivers_repeated_code_once(monkeypatch) -> None:
    from qr_attendance.services import QRScanner, qr_scanner

    monkeypatch.setattr(qr_scanner, "SCAN_INTERVAL_SECONDS", 0)
    scanner = QRScanner(camera_index=0)
    capture = _FakeCapture(frames=3)
    received: list[SessionDescriptor] = []

    read_frame = capture.read

    def read():
        ok, frame = read_frame()
        if not ok:
            scanner._stop_event.set()
        return ok, frame

    capture.read = read
    scanner._run_loop(received.append, None, _FakeCv2(capture), _FakePyzbar())

    assert received == [MATH]
    assert capture.released
    assert not scanner.is_running

"""
Test Configuration and Fixtures

Shared fixtures for the stock-count engine test suite: a fixed clock, fake
scanner hardware that counts camera acquire/release, and ready-made sessions.
"""

import json
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from lagerkontroll.application.services.scan_acquisition import ScanAcquisitionController
from lagerkontroll.domain.clock import FixedClock
from lagerkontroll.domain.entities.count_session import CountSession
from lagerkontroll.infrastructure.hardware.abstract.barcode_interface import BarcodeDetectorInterface
from lagerkontroll.infrastructure.hardware.abstract.camera_interface import (
    CameraStatus,
    CameraStreamInterface,
)

TEST_POLL_INTERVAL_S = 0.01


class FakeCamera(CameraStreamInterface):
    """Camera double tracking how often the stream was acquired and released"""

    def __init__(self, open_error: Optional[Exception] = None, acquire_before_error: bool = False,
                 read_error: Optional[Exception] = None):
        self.open_error = open_error
        self.acquire_before_error = acquire_before_error
        self.read_error = read_error
        self.acquire_count = 0
        self.release_count = 0
        self.open_calls = 0
        self.frames_read = 0
        self._status = CameraStatus.CLOSED

    @property
    def status(self) -> CameraStatus:
        return self._status

    @property
    def is_held(self) -> bool:
        return self._status == CameraStatus.STREAMING

    async def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None and not self.acquire_before_error:
            raise self.open_error
        self._status = CameraStatus.STREAMING
        self.acquire_count += 1
        if self.open_error is not None:
            raise self.open_error

    def close(self) -> None:
        if self._status == CameraStatus.STREAMING:
            self.release_count += 1
        self._status = CameraStatus.CLOSED

    async def read_frame(self):
        if self.read_error is not None:
            raise self.read_error
        if self._status != CameraStatus.STREAMING:
            return None
        self.frames_read += 1
        return f"frame-{self.frames_read}"


class FakeDetector(BarcodeDetectorInterface):
    """Detector double answering from a script, one entry per detect() call"""

    def __init__(self, script: Sequence[List[str]] = (), supported: bool = True):
        self.script = list(script)
        self.supported = supported
        self.detect_calls = 0

    def is_supported(self) -> bool:
        return self.supported

    async def detect(self, frame) -> List[str]:
        self.detect_calls += 1
        if self.script:
            return self.script.pop(0)
        return []


@pytest.fixture
def session_day():
    """Monday of ISO week 4, 2025"""
    return date(2025, 1, 20)


@pytest.fixture
def fixed_clock(session_day):
    return FixedClock(session_day)


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def fake_detector():
    return FakeDetector(script=[[], [], ["7038010055720", "IGNORED"]])


@pytest.fixture
def scan_controller(fake_camera, fake_detector):
    return ScanAcquisitionController(fake_camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)


@pytest.fixture
def exports():
    """Collects every export handed to the session"""
    return []


@pytest.fixture
def session(fixed_clock, scan_controller, exports):
    return CountSession(clock=fixed_clock, scan_controller=scan_controller, export_handler=exports.append)


@pytest.fixture
def registering_session(session):
    session.select_warehouse("demo", "Demo")
    return session


@pytest.fixture
def warehouses_file(tmp_path) -> Path:
    path = tmp_path / "lagre.json"
    path.write_text(json.dumps([
        {"id": "demo", "navn": "Demo", "aktiv": True},
        {"id": "hoved", "navn": "Hovedlager Sarpsborg", "aktiv": True},
        {"id": "gammelt", "navn": "Gammelt lager", "aktiv": False},
    ]), encoding="utf-8")
    return path

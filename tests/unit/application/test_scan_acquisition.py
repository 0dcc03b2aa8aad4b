"""
Unit Tests for ScanAcquisitionController

Tests the acquire/release protocol: every path that opens the camera closes it
exactly once, at most one result is emitted per start, and a second start
while active is ignored.
"""

import asyncio
from unittest.mock import Mock

import pytest

from conftest import TEST_POLL_INTERVAL_S, FakeCamera, FakeDetector
from lagerkontroll.application.services.scan_acquisition import ScanAcquisitionController
from lagerkontroll.domain.errors import AcquisitionError, UnsupportedCapabilityError


class GatedCamera(FakeCamera):
    """Camera whose open() blocks until the test releases it"""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def open(self) -> None:
        await self.gate.wait()
        await super().open()


def capture_recorder():
    """Callback that records values and signals the first capture"""
    event = asyncio.Event()
    values = []

    def on_captured(value):
        values.append(value)
        event.set()

    return on_captured, values, event


class TestScanStart:
    """Test starting an acquisition"""

    @pytest.mark.asyncio
    async def test_start_opens_camera_and_captures_first_payload(self, scan_controller, fake_camera):
        on_captured, values, captured = capture_recorder()

        assert await scan_controller.start(on_captured) is True
        assert scan_controller.is_active is True
        assert fake_camera.acquire_count == 1

        await asyncio.wait_for(captured.wait(), timeout=2.0)

        assert values == ["7038010055720"]
        assert scan_controller.is_active is False
        assert fake_camera.acquire_count == fake_camera.release_count == 1

    @pytest.mark.asyncio
    async def test_camera_released_before_callback(self, scan_controller, fake_camera):
        held_during_callback = []
        done = asyncio.Event()

        def on_captured(value):
            held_during_callback.append(fake_camera.is_held)
            done.set()

        await scan_controller.start(on_captured)
        await asyncio.wait_for(done.wait(), timeout=2.0)

        assert held_during_callback == [False]

    @pytest.mark.asyncio
    async def test_single_emission(self, fake_camera):
        detector = FakeDetector(script=[["A1"], ["A2"], ["A3"]])
        controller = ScanAcquisitionController(fake_camera, detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        on_captured, values, captured = capture_recorder()

        await controller.start(on_captured)
        await asyncio.wait_for(captured.wait(), timeout=2.0)
        await asyncio.sleep(TEST_POLL_INTERVAL_S * 5)

        assert values == ["A1"]
        assert detector.detect_calls == 1

    @pytest.mark.asyncio
    async def test_second_start_while_active_is_ignored(self, scan_controller, fake_camera):
        first = Mock()
        second = Mock()
        await scan_controller.start(first)

        assert await scan_controller.start(second) is False

        assert fake_camera.open_calls == 1
        assert fake_camera.acquire_count == 1
        scan_controller.cancel()

    @pytest.mark.asyncio
    async def test_restart_after_capture(self, fake_camera):
        detector = FakeDetector(script=[["A1"], ["A2"]])
        controller = ScanAcquisitionController(fake_camera, detector, poll_interval_s=TEST_POLL_INTERVAL_S)

        for expected in ("A1", "A2"):
            on_captured, values, captured = capture_recorder()
            assert await controller.start(on_captured) is True
            await asyncio.wait_for(captured.wait(), timeout=2.0)
            assert values == [expected]

        assert fake_camera.acquire_count == fake_camera.release_count == 2

    @pytest.mark.asyncio
    async def test_skips_empty_frames(self, fake_detector):
        camera = FakeCamera()
        frames = [None, None]
        original_read = camera.read_frame

        async def read_frame():
            if frames:
                return frames.pop()
            return await original_read()

        camera.read_frame = read_frame
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        on_captured, values, captured = capture_recorder()

        await controller.start(on_captured)
        await asyncio.wait_for(captured.wait(), timeout=2.0)

        assert values == ["7038010055720"]
        assert fake_detector.detect_calls == 3


class TestScanFailures:
    """Test unsupported runtimes and camera failures"""

    @pytest.mark.asyncio
    async def test_unsupported_detector_never_opens_camera(self, fake_camera):
        controller = ScanAcquisitionController(fake_camera, FakeDetector(supported=False))

        assert controller.is_supported() is False
        with pytest.raises(UnsupportedCapabilityError):
            await controller.start(Mock())

        assert fake_camera.open_calls == 0
        assert controller.is_active is False

    @pytest.mark.asyncio
    async def test_open_failure_raises_acquisition_error(self, fake_detector):
        camera = FakeCamera(open_error=PermissionError("denied"))
        controller = ScanAcquisitionController(camera, fake_detector)

        with pytest.raises(AcquisitionError) as exc_info:
            await controller.start(Mock())

        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert controller.is_active is False
        assert camera.acquire_count == camera.release_count == 0

    @pytest.mark.asyncio
    async def test_partial_open_failure_releases_stream(self, fake_detector):
        camera = FakeCamera(open_error=RuntimeError("stream died"), acquire_before_error=True)
        controller = ScanAcquisitionController(camera, fake_detector)

        with pytest.raises(AcquisitionError):
            await controller.start(Mock())

        assert camera.acquire_count == camera.release_count == 1

    @pytest.mark.asyncio
    async def test_start_possible_after_open_failure(self, fake_detector):
        camera = FakeCamera(open_error=RuntimeError("busy"))
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)

        with pytest.raises(AcquisitionError):
            await controller.start(Mock())

        camera.open_error = None
        on_captured, values, captured = capture_recorder()
        assert await controller.start(on_captured) is True
        await asyncio.wait_for(captured.wait(), timeout=2.0)
        assert values == ["7038010055720"]

    @pytest.mark.asyncio
    async def test_read_failure_reports_error_and_releases(self, fake_detector):
        camera = FakeCamera(read_error=OSError("device lost"))
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        on_captured = Mock()
        errors = []
        failed = asyncio.Event()

        def on_error(error):
            errors.append(error)
            failed.set()

        await controller.start(on_captured, on_error)
        await asyncio.wait_for(failed.wait(), timeout=2.0)

        assert len(errors) == 1
        assert isinstance(errors[0], AcquisitionError)
        on_captured.assert_not_called()
        assert controller.is_active is False
        assert camera.acquire_count == camera.release_count == 1

    @pytest.mark.asyncio
    async def test_release_failure_is_logged_not_raised(self, fake_detector, caplog):
        camera = FakeCamera()
        camera.close = Mock(side_effect=RuntimeError("close failed"))
        controller = ScanAcquisitionController(camera, fake_detector)

        await controller.start(Mock())
        controller.cancel()

        assert controller.is_active is False
        assert "Failed to release camera" in caplog.text


class TestScanCancel:
    """Test cancellation"""

    @pytest.mark.asyncio
    async def test_cancel_releases_without_emitting(self, scan_controller, fake_camera):
        on_captured = Mock()
        await scan_controller.start(on_captured)

        scan_controller.cancel()
        await asyncio.sleep(TEST_POLL_INTERVAL_S * 10)

        on_captured.assert_not_called()
        assert scan_controller.is_active is False
        assert fake_camera.acquire_count == fake_camera.release_count == 1

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self, scan_controller, fake_camera):
        await scan_controller.start(Mock())

        scan_controller.cancel()
        scan_controller.cancel()

        assert fake_camera.release_count == 1

    def test_cancel_when_idle_is_noop(self, scan_controller, fake_camera):
        scan_controller.cancel()

        assert fake_camera.release_count == 0
        assert scan_controller.is_active is False

    @pytest.mark.asyncio
    async def test_cancel_during_open_releases_once_opened(self, fake_detector):
        camera = GatedCamera()
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        on_captured = Mock()

        start_task = asyncio.create_task(controller.start(on_captured))
        await asyncio.sleep(0)
        assert controller.is_active is True

        controller.cancel()
        camera.gate.set()

        assert await start_task is False
        await asyncio.sleep(TEST_POLL_INTERVAL_S * 5)

        on_captured.assert_not_called()
        assert controller.is_active is False
        assert camera.acquire_count == camera.release_count == 1

    @pytest.mark.asyncio
    async def test_second_start_during_open_is_ignored(self, fake_detector):
        camera = GatedCamera()
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)

        start_task = asyncio.create_task(controller.start(Mock()))
        await asyncio.sleep(0)

        assert await controller.start(Mock()) is False

        camera.gate.set()
        assert await start_task is True
        controller.cancel()
        assert camera.acquire_count == camera.release_count == 1


class TestScanCallbacks:
    """Test failures raised by result callbacks"""

    @pytest.mark.asyncio
    async def test_failing_capture_callback_is_logged(self, scan_controller, fake_camera, caplog):
        called = asyncio.Event()

        def on_captured(value):
            called.set()
            raise RuntimeError("display gone")

        await scan_controller.start(on_captured)
        await asyncio.wait_for(called.wait(), timeout=2.0)
        await asyncio.sleep(0)

        assert "Scan callback" in caplog.text
        assert "display gone" in caplog.text
        assert scan_controller.is_active is False
        assert fake_camera.acquire_count == fake_camera.release_count == 1

    @pytest.mark.asyncio
    async def test_failing_error_callback_is_logged(self, fake_detector, caplog):
        camera = FakeCamera(read_error=OSError("device lost"))
        controller = ScanAcquisitionController(camera, fake_detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        called = asyncio.Event()

        def on_error(error):
            called.set()
            raise RuntimeError("handler broke")

        await controller.start(Mock(), on_error)
        await asyncio.wait_for(called.wait(), timeout=2.0)
        await asyncio.sleep(0)

        assert "handler broke" in caplog.text
        assert controller.is_active is False

    @pytest.mark.asyncio
    async def test_controller_reusable_after_callback_failure(self, fake_camera):
        detector = FakeDetector(script=[["A1"], ["A2"]])
        controller = ScanAcquisitionController(fake_camera, detector, poll_interval_s=TEST_POLL_INTERVAL_S)
        failed = asyncio.Event()

        def broken(value):
            failed.set()
            raise ValueError(value)

        await controller.start(broken)
        await asyncio.wait_for(failed.wait(), timeout=2.0)
        await asyncio.sleep(0)

        on_captured, values, captured = capture_recorder()
        assert await controller.start(on_captured) is True
        await asyncio.wait_for(captured.wait(), timeout=2.0)
        assert values == ["A2"]

"""
Scan Acquisition Controller - Application Service

Turns a camera stream plus a barcode detector into one captured article
number. The controller is the only owner of the camera: at most one stream
and one poll task exist per instance, and the camera is released on every exit
path (capture, cancel, open failure, detection failure).

Results are delivered through callbacks on the event loop; nothing here
blocks the caller beyond opening the camera.
"""

import asyncio
import logging
from typing import Callable, Optional

from ...domain.errors import AcquisitionError, UnsupportedCapabilityError
from ...infrastructure.hardware.abstract.barcode_interface import BarcodeDetectorInterface
from ...infrastructure.hardware.abstract.camera_interface import CameraStreamInterface

logger = logging.getLogger(__name__)

CapturedCallback = Callable[[str], None]
ErrorCallback = Callable[[AcquisitionError], None]

DEFAULT_POLL_INTERVAL_S = 0.5


class ScanAcquisitionController:
    """
    Bounded-lifetime barcode acquisition

    A second ``start()`` while an acquisition is active (or still opening the
    camera) is ignored and returns False. ``cancel()`` is idempotent.
    """

    def __init__(
        self,
        camera: CameraStreamInterface,
        detector: BarcodeDetectorInterface,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        self._camera = camera
        self._detector = detector
        self._poll_interval_s = poll_interval_s

        self._active = False
        self._opening = False
        self._poll_task: Optional[asyncio.Task] = None
        self._on_captured: Optional[CapturedCallback] = None
        self._on_error: Optional[ErrorCallback] = None

    @property
    def is_active(self) -> bool:
        """Whether an acquisition holds (or is opening) the camera"""
        return self._active

    @property
    def poll_interval_s(self) -> float:
        return self._poll_interval_s

    def is_supported(self) -> bool:
        return self._detector.is_supported()

    async def start(self, on_captured: CapturedCallback, on_error: Optional[ErrorCallback] = None) -> bool:
        """
        Open the camera and begin polling for barcodes

        Args:
            on_captured: Called once with the first detected payload
            on_error: Called if the camera fails after polling has begun

        Returns:
            True if a new acquisition started, False if one was already running

        Raises:
            UnsupportedCapabilityError: If barcode detection is unavailable
            AcquisitionError: If the camera could not be opened
        """
        if self._active or self._opening:
            logger.warning("Scan acquisition already active; start ignored")
            return False

        if not self._detector.is_supported():
            raise UnsupportedCapabilityError("Barcode detection is not supported in this runtime")

        self._active = True
        self._opening = True
        self._on_captured = on_captured
        self._on_error = on_error

        try:
            await self._camera.open()
        except asyncio.CancelledError:
            self._stop()
            raise
        except Exception as e:
            logger.error(f"Failed to open camera for scanning: {e}")
            self._stop()
            raise AcquisitionError(f"Camera access failed: {e}") from e
        finally:
            self._opening = False

        if not self._active:
            # cancel() ran while the camera was opening
            logger.info("Scan cancelled during camera startup; releasing stream")
            self._release()
            return False

        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info(f"Scan acquisition started (poll interval {self._poll_interval_s}s)")
        return True

    def cancel(self) -> None:
        """Stop polling and release the camera; no result is emitted"""
        if not self._active:
            return
        logger.info("Scan acquisition cancelled")
        self._stop()

    async def _poll_loop(self) -> None:
        try:
            value = await self._poll_until_detected()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            on_error = self._on_error
            self._stop()
            logger.error(f"Barcode scan failed: {e}")
            if on_error is not None:
                self._notify(on_error, AcquisitionError(f"Barcode scan failed: {e}"))
            return

        on_captured = self._on_captured
        self._stop()
        logger.info(f"Barcode captured: {value}")
        if on_captured is not None:
            self._notify(on_captured, value)

    @staticmethod
    def _notify(callback: Callable, argument) -> None:
        try:
            callback(argument)
        except Exception:
            logger.exception(f"Scan callback {getattr(callback, '__name__', callback)!r} failed")

    async def _poll_until_detected(self) -> str:
        while True:
            await asyncio.sleep(self._poll_interval_s)

            frame = await self._camera.read_frame()
            if frame is None:
                continue

            payloads = await self._detector.detect(frame)
            if payloads:
                return payloads[0]

    def _stop(self) -> None:
        task = self._poll_task
        self._poll_task = None
        self._active = False
        self._on_captured = None
        self._on_error = None

        if task is not None and task is not _current_task():
            task.cancel()

        self._release()

    def _release(self) -> None:
        try:
            self._camera.close()
        except Exception as e:
            logger.error(f"Failed to release camera: {e}")


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None

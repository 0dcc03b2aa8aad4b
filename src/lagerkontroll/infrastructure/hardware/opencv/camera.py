"""OpenCV camera stream for barcode scanning"""

import asyncio
import logging
import threading
from typing import Optional

import cv2
import numpy as np

from ..abstract.camera_interface import CameraStatus, CameraStreamInterface

logger = logging.getLogger(__name__)


class OpenCVCamera(CameraStreamInterface):
    """Camera stream backed by ``cv2.VideoCapture``

    Blocking OpenCV calls run in the default executor so the event loop keeps
    serving commands while the device starts up. ``VideoCapture`` is not
    thread-safe: reads and the release share a lock, so ``close()`` waits for
    an in-flight read to finish.
    """

    def __init__(self, camera_index: int = 0):
        self.camera_index = camera_index
        self._capture: Optional[cv2.VideoCapture] = None
        self._status = CameraStatus.CLOSED
        self._lock = threading.Lock()

    @property
    def status(self) -> CameraStatus:
        return self._status

    async def open(self) -> None:
        if self._capture is not None:
            return

        self._status = CameraStatus.OPENING
        loop = asyncio.get_event_loop()
        capture = await loop.run_in_executor(None, cv2.VideoCapture, self.camera_index)

        if self._status != CameraStatus.OPENING:
            # close() was called while the device was starting
            capture.release()
            return

        if not capture.isOpened():
            capture.release()
            self._status = CameraStatus.ERROR
            raise RuntimeError(f"Camera {self.camera_index} could not be opened")

        with self._lock:
            self._capture = capture
            self._status = CameraStatus.STREAMING
        logger.info(f"Camera {self.camera_index} opened")

    def close(self) -> None:
        with self._lock:
            capture = self._capture
            self._capture = None
            self._status = CameraStatus.CLOSED
            if capture is not None:
                capture.release()
        if capture is not None:
            logger.info(f"Camera {self.camera_index} released")

    async def read_frame(self) -> Optional[np.ndarray]:
        if self._capture is None:
            return None

        ok, frame = await asyncio.get_event_loop().run_in_executor(None, self._read_locked)
        if not ok:
            logger.debug(f"Camera {self.camera_index} returned no frame")
            return None
        return frame

    def _read_locked(self):
        with self._lock:
            if self._capture is None:
                return False, None
            return self._capture.read()

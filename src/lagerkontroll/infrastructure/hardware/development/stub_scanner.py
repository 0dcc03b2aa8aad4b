"""
Development Scanner Stubs

Functional stand-ins for the camera and barcode detector so the full scan
flow can run on machines without a camera. The stub detector "finds" a
scripted payload after a configurable number of frames.
"""

import asyncio
import logging
from collections import deque
from typing import Iterable, List, Optional

import numpy as np

from ..abstract.barcode_interface import BarcodeDetectorInterface
from ..abstract.camera_interface import CameraStatus, CameraStreamInterface

logger = logging.getLogger(__name__)


class StubCamera(CameraStreamInterface):
    """Camera stub producing blank grayscale frames"""

    def __init__(self, resolution=(480, 640), open_delay_s: float = 0.05):
        self._resolution = resolution
        self._open_delay_s = open_delay_s
        self._status = CameraStatus.CLOSED
        self._frame_count = 0
        logger.info("Development camera stub initialized")

    @property
    def status(self) -> CameraStatus:
        return self._status

    @property
    def frame_count(self) -> int:
        return self._frame_count

    async def open(self) -> None:
        self._status = CameraStatus.OPENING
        # Simulate device startup
        await asyncio.sleep(self._open_delay_s)
        if self._status == CameraStatus.OPENING:
            self._status = CameraStatus.STREAMING
            logger.info("Development camera stub streaming")

    def close(self) -> None:
        if self._status != CameraStatus.CLOSED:
            logger.info("Development camera stub closed")
        self._status = CameraStatus.CLOSED

    async def read_frame(self) -> Optional[np.ndarray]:
        if self._status != CameraStatus.STREAMING:
            return None
        self._frame_count += 1
        return np.zeros(self._resolution, dtype=np.uint8)


class StubBarcodeDetector(BarcodeDetectorInterface):
    """Detector stub returning scripted payloads"""

    def __init__(self, payloads: Iterable[str] = ("7038010055720",), frames_per_detection: int = 3,
                 supported: bool = True):
        self._payloads = deque(payloads)
        self._frames_per_detection = max(1, frames_per_detection)
        self._supported = supported
        self._frames_seen = 0

    def is_supported(self) -> bool:
        return self._supported

    def queue_payload(self, payload: str) -> None:
        self._payloads.append(payload)

    async def detect(self, frame: np.ndarray) -> List[str]:
        self._frames_seen += 1
        if self._frames_seen % self._frames_per_detection or not self._payloads:
            return []
        payload = self._payloads.popleft()
        # Keep the stub usable for repeated scans
        self._payloads.append(payload)
        return [payload]

"""Camera Interface - Abstract camera stream used for barcode scanning"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from enum import Enum

# Frames are opaque to the engine; OpenCV hands out numpy arrays
Frame = Any


class CameraStatus(Enum):
    """Camera status enumeration"""
    CLOSED = "closed"
    OPENING = "opening"
    STREAMING = "streaming"
    ERROR = "error"


class CameraStreamInterface(ABC):
    """Abstract interface for a live camera stream"""

    @abstractmethod
    async def open(self) -> None:
        """Acquire the camera; raise on permission or device failure"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the camera; must be safe to call when already closed"""
        pass

    @abstractmethod
    async def read_frame(self) -> Optional[Frame]:
        """Get the current frame, or None if no frame is ready"""
        pass

    @property
    @abstractmethod
    def status(self) -> CameraStatus:
        """Get current camera status"""
        pass

    @property
    def is_open(self) -> bool:
        return self.status == CameraStatus.STREAMING

"""Barcode Detector Interface - Abstract barcode detection capability"""

from abc import ABC, abstractmethod
from typing import List

from .camera_interface import Frame

DEFAULT_BARCODE_FORMATS = ("qr_code", "ean_13", "code_128")


class BarcodeDetectorInterface(ABC):
    """Abstract interface for detecting barcode payloads in a frame"""

    @abstractmethod
    def is_supported(self) -> bool:
        """Whether the runtime can detect barcodes at all"""
        pass

    @abstractmethod
    async def detect(self, frame: Frame) -> List[str]:
        """Return raw payloads found in the frame, in detection order"""
        pass

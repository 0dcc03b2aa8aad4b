"""OpenCV barcode and QR code detection"""

import asyncio
import logging
from typing import Iterable, List

import cv2
import numpy as np

from ..abstract.barcode_interface import DEFAULT_BARCODE_FORMATS, BarcodeDetectorInterface

logger = logging.getLogger(__name__)

# 1D symbologies handled by cv2.barcode (EAN-8/13, UPC-A/E, Code 39/93/128)
LINEAR_FORMATS = {"ean_8", "ean_13", "upc_a", "upc_e", "code_39", "code_93", "code_128"}


class OpenCVBarcodeDetector(BarcodeDetectorInterface):
    """Detects linear barcodes with ``cv2.barcode`` and QR codes with ``cv2.QRCodeDetector``"""

    def __init__(self, formats: Iterable[str] = DEFAULT_BARCODE_FORMATS):
        self.formats = tuple(formats)
        self._linear_enabled = any(f in LINEAR_FORMATS for f in self.formats)
        self._qr_enabled = "qr_code" in self.formats

        self._barcode_detector = None
        self._qr_detector = None
        if self._linear_enabled and self._has_linear_support():
            self._barcode_detector = cv2.barcode.BarcodeDetector()
        if self._qr_enabled:
            self._qr_detector = cv2.QRCodeDetector()

    @staticmethod
    def _has_linear_support() -> bool:
        barcode_module = getattr(cv2, "barcode", None)
        return barcode_module is not None and hasattr(barcode_module, "BarcodeDetector")

    def is_supported(self) -> bool:
        return self._barcode_detector is not None or self._qr_detector is not None

    async def detect(self, frame: np.ndarray) -> List[str]:
        return await asyncio.get_event_loop().run_in_executor(None, self._detect_sync, frame)

    def _detect_sync(self, frame: np.ndarray) -> List[str]:
        payloads: List[str] = []

        if self._barcode_detector is not None:
            ok, decoded_info, _, _ = self._barcode_detector.detectAndDecodeWithType(frame)
            if ok:
                payloads.extend(value for value in decoded_info if value)

        if self._qr_detector is not None:
            ok, decoded_info, _, _ = self._qr_detector.detectAndDecodeMulti(frame)
            if ok:
                payloads.extend(value for value in decoded_info if value)

        if payloads:
            logger.debug(f"Detected {len(payloads)} barcode payload(s)")
        return payloads

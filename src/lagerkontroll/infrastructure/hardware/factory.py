"""
Scanner Hardware Factory

Selects the camera and barcode detector implementations:
- production: OpenCV camera + OpenCV barcode/QR detector
- development: stubs that need no camera

The OpenCV implementations are imported on demand so development runs work
without a camera stack installed.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ...config import ScanConfig
from .abstract.barcode_interface import BarcodeDetectorInterface
from .abstract.camera_interface import CameraStreamInterface

logger = logging.getLogger(__name__)


class ScannerCapability(BaseModel):
    """Scanner capability detection result"""
    available: bool = Field(description="Whether barcode scanning can be used")
    simulated: bool = Field(default=False, description="Whether stub hardware is in use")
    formats: tuple[str, ...] = Field(default=(), description="Barcode formats requested")


class ScannerHardwareFactory:
    """Builds scanner hardware for the configured mode"""

    def __init__(self, scan_config: Optional[ScanConfig] = None, development_mode: bool = False):
        self._config = scan_config or ScanConfig()
        self._development_mode = development_mode
        logger.info(f"Scanner hardware factory initialized (development_mode={development_mode})")

    @property
    def development_mode(self) -> bool:
        return self._development_mode

    def create_camera(self) -> CameraStreamInterface:
        if self._development_mode:
            from .development.stub_scanner import StubCamera
            return StubCamera()

        from .opencv.camera import OpenCVCamera
        return OpenCVCamera(camera_index=self._config.camera_index)

    def create_detector(self) -> BarcodeDetectorInterface:
        if self._development_mode:
            from .development.stub_scanner import StubBarcodeDetector
            return StubBarcodeDetector()

        from .opencv.barcode_detector import OpenCVBarcodeDetector
        return OpenCVBarcodeDetector(formats=self._config.barcode_formats)

    def create_scan_controller(self):
        """Controller wired to this factory's camera and detector"""
        from ...application.services.scan_acquisition import ScanAcquisitionController

        return ScanAcquisitionController(
            camera=self.create_camera(),
            detector=self.create_detector(),
            poll_interval_s=self._config.poll_interval_s,
        )

    def detect_capability(self, detector: BarcodeDetectorInterface) -> ScannerCapability:
        return ScannerCapability(
            available=detector.is_supported(),
            simulated=self._development_mode,
            formats=tuple(self._config.barcode_formats),
        )

"""Application configuration primitives.

All runtime configuration is expressed as immutable dataclasses so that
components receive explicit settings during initialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class ScanConfig:
    """Barcode scanning configuration."""

    poll_interval_s: float = 0.5
    camera_index: int = 0
    barcode_formats: Tuple[str, ...] = ("qr_code", "ean_13", "code_128")


@dataclass(frozen=True)
class StorageConfig:
    """Warehouse list and export locations."""

    warehouses_path: Path = Path("data/lagre.json")
    export_directory: Path = Path("exports")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    log_file: Optional[Path] = Path("lagerkontroll.log")
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Composite application configuration."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    development_mode: bool = False

    @staticmethod
    def default() -> "AppConfig":
        """Build the default configuration for the application."""
        return AppConfig()

    def with_overrides(
        self,
        warehouses_path: Optional[Path] = None,
        export_directory: Optional[Path] = None,
        camera_index: Optional[int] = None,
        log_level: Optional[str] = None,
        development_mode: Optional[bool] = None,
    ) -> "AppConfig":
        """Copy of this configuration with command-line overrides applied."""
        storage = self.storage
        if warehouses_path is not None:
            storage = replace(storage, warehouses_path=Path(warehouses_path))
        if export_directory is not None:
            storage = replace(storage, export_directory=Path(export_directory))

        scan = self.scan
        if camera_index is not None:
            scan = replace(scan, camera_index=camera_index)

        logging_config = self.logging
        if log_level is not None:
            logging_config = replace(logging_config, level=log_level.upper())

        return replace(
            self,
            scan=scan,
            storage=storage,
            logging=logging_config,
            development_mode=self.development_mode if development_mode is None else development_mode,
        )

"""File system sink for finished CSV exports"""

import logging
from pathlib import Path
from typing import Union

from ...domain.errors import ExportWriteError
from ...domain.repositories.warehouse_repository import ExportSinkInterface
from ...domain.value_objects.export import CsvExport

logger = logging.getLogger(__name__)


class FileExportSink(ExportSinkInterface):
    """
    Writes exports as UTF-8 files into a directory

    An existing file with the same name is overwritten; the name already
    encodes week and warehouse, so a re-export of the same round replaces the
    earlier file.
    """

    def __init__(self, export_directory: Union[str, Path]):
        self.export_directory = Path(export_directory)

    def save(self, export: CsvExport) -> Path:
        target = self.export_directory / export.filename
        try:
            self.export_directory.mkdir(parents=True, exist_ok=True)
            target.write_text(export.content, encoding="utf-8", newline="")
        except OSError as e:
            logger.error(f"Failed to write export {target}: {e}")
            raise ExportWriteError(f"Could not write {target}: {e}") from e

        logger.info(f"Export written: {target} ({export.item_count} rows)")
        return target

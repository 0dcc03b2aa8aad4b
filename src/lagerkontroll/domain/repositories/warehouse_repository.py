"""
Domain Repository Interfaces

Abstract interfaces for the warehouse list source and the export sink.
Implemented by the infrastructure layer.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..value_objects.export import CsvExport
from ..value_objects.warehouse import Warehouse


class WarehouseRepositoryInterface(ABC):
    """Read-only source of warehouses"""

    @abstractmethod
    async def list_warehouses(self) -> List[Warehouse]:
        """Return every warehouse, active or not

        Raises:
            WarehouseLoadError: If the source cannot be read or parsed
        """
        pass

    async def list_active_warehouses(self) -> List[Warehouse]:
        """Return only warehouses flagged active"""
        return [w for w in await self.list_warehouses() if w.active]


class ExportSinkInterface(ABC):
    """Destination for finished CSV exports"""

    @abstractmethod
    def save(self, export: CsvExport) -> Path:
        """Persist an export and return where it ended up"""
        pass

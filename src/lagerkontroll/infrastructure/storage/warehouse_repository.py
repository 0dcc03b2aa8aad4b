"""
JSON Warehouse Repository

Reads the static warehouse list (``data/lagre.json`` by default): a JSON array
of objects with ``id``, ``navn``/``name`` and ``aktiv``/``active``.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError as PydanticValidationError

from ...domain.errors import WarehouseLoadError
from ...domain.repositories.warehouse_repository import WarehouseRepositoryInterface
from ...domain.value_objects.warehouse import Warehouse

logger = logging.getLogger(__name__)


class JsonWarehouseRepository(WarehouseRepositoryInterface):
    """Warehouse list backed by a JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def list_warehouses(self) -> List[Warehouse]:
        if not self.path.exists():
            raise WarehouseLoadError(f"Warehouse file not found: {self.path}")

        def _read_file():
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)

        try:
            raw = await asyncio.get_event_loop().run_in_executor(None, _read_file)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read warehouse file {self.path}: {e}")
            raise WarehouseLoadError(f"Could not read {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise WarehouseLoadError(f"Expected a JSON array in {self.path}")

        try:
            warehouses = [Warehouse.model_validate(entry) for entry in raw]
        except PydanticValidationError as e:
            logger.error(f"Invalid warehouse entry in {self.path}: {e}")
            raise WarehouseLoadError(f"Invalid warehouse entry in {self.path}") from e

        logger.debug(f"Read {len(warehouses)} warehouses from {self.path}")
        return warehouses

"""
Count Round Use Case

Coordinates a stock-count round across the session entity, the warehouse
source and the export sink.

Key Responsibilities:
- Loading the selectable (active) warehouses
- Resolving a warehouse id to its display name when a round starts
- Forwarding item, scan, finish and discard commands to the session
- Writing finished exports through the sink
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ...domain.entities.count_session import CountSession
from ...domain.errors import InvalidStateError, WarehouseLoadError
from ...domain.repositories.warehouse_repository import (
    ExportSinkInterface,
    WarehouseRepositoryInterface,
)
from ...domain.value_objects.count_item import CountItem
from ...domain.value_objects.export import CsvExport
from ...domain.value_objects.warehouse import Warehouse

logger = logging.getLogger(__name__)

AsyncConfirm = Callable[[], Awaitable[bool]]


class CountRoundUseCase:
    """Stock-count round orchestration"""

    def __init__(
        self,
        warehouse_repository: WarehouseRepositoryInterface,
        export_sink: ExportSinkInterface,
        session_factory: Callable[..., CountSession] = CountSession,
        **session_kwargs: Any,
    ):
        """
        Args:
            warehouse_repository: Source of the warehouse list
            export_sink: Destination for finished exports
            session_factory: Builds the single session for this process
            session_kwargs: Extra arguments for the session (clock, scan_controller)
        """
        self.warehouse_repository = warehouse_repository
        self.export_sink = export_sink
        self.session = session_factory(export_handler=self.export_sink.save, **session_kwargs)

        self._warehouses: Dict[str, Warehouse] = {}

        logger.info("Count round use case initialized")

    @property
    def warehouses(self) -> List[Warehouse]:
        """Selectable warehouses in source order"""
        return list(self._warehouses.values())

    async def load_warehouses(self) -> List[Warehouse]:
        """
        Load the active warehouses

        On failure the previous list is dropped, the session stays where it
        is and WarehouseLoadError is raised for the caller to report.
        """
        try:
            active = await self.warehouse_repository.list_active_warehouses()
        except WarehouseLoadError:
            self._warehouses = {}
            raise

        self._warehouses = {w.id: w for w in active}
        if not active:
            logger.warning("No active warehouses found")
            raise WarehouseLoadError("No active warehouses found")

        logger.info(f"Loaded {len(active)} active warehouses")
        return self.warehouses

    def start_round(self, warehouse_id: str) -> Warehouse:
        warehouse = self._warehouses.get((warehouse_id or "").strip())
        if warehouse is None:
            raise InvalidStateError(f"Unknown or inactive warehouse: {warehouse_id!r}")

        self.session.select_warehouse(warehouse.id, warehouse.name)
        return warehouse

    def add_item(self, article_number: Any, quantity: Any, comment: Optional[str] = "") -> int:
        return self.session.add_item(article_number, quantity, comment)

    def edit_item(self, index: int, **fields: Any) -> CountItem:
        return self.session.edit_item(index, **fields)

    def remove_item(self, index: int) -> CountItem:
        return self.session.remove_item(index)

    async def finish_round(self, confirm_new_round: AsyncConfirm) -> CsvExport:
        """
        Export the round, then ask whether to start a new one

        Declining keeps the items in place.
        """
        export = self.session.export_round()
        if await confirm_new_round():
            self.session.start_new_round()
        return export

    async def discard_round(self, confirm: AsyncConfirm) -> bool:
        """Drop the round; an empty round is left without asking"""
        confirmed = self.session.ledger.is_empty or await confirm()
        return self.session.discard(lambda: confirmed)

    async def start_scan(self, on_captured: Callable[[str], None],
                         on_error: Optional[Callable[[Exception], None]] = None) -> bool:
        return await self.session.start_scan(on_captured, on_error)

    def cancel_scan(self) -> None:
        self.session.cancel_scan()

"""
Count Session Entity - stock-count round state machine

States:
    AWAITING_WAREHOUSE --select_warehouse--> REGISTERING
    REGISTERING --finish (new round accepted) / discard--> AWAITING_WAREHOUSE

Every command checks the current state first and a failed command leaves
state, warehouse and ledger untouched. Date and ISO week are frozen when the
session is constructed and survive every new round.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from ..clock import Clock, SystemClock
from ..errors import EmptyLedgerError, InvalidStateError, UnsupportedCapabilityError
from ..services.csv_export import serialize_session
from ..value_objects.count_item import CountItem
from ..value_objects.export import CsvExport, SessionCalendar, SessionHeader
from ..value_objects.session_state import SessionState, SessionTransition
from .ledger import Ledger

logger = logging.getLogger(__name__)

Confirm = Callable[[], bool]
ExportHandler = Callable[[CsvExport], Any]


class ScanController(Protocol):
    """What the session needs from a barcode scan controller"""

    @property
    def is_active(self) -> bool: ...

    def start(self, on_captured: Callable[[str], None],
              on_error: Optional[Callable[[Exception], None]] = None) -> Awaitable[bool]: ...

    def cancel(self) -> None: ...


class CountSession:
    """
    One operator's stock-count session

    Owns exactly one Ledger for the lifetime of the process. ``finish`` and
    ``discard`` take a confirmation callable so the presentation layer decides
    how to ask the operator.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        scan_controller: Optional[ScanController] = None,
        export_handler: Optional[ExportHandler] = None,
    ):
        self._clock = clock or SystemClock()
        self._calendar = SessionCalendar.from_date(self._clock.today())
        self._scan_controller = scan_controller
        self._export_handler = export_handler

        self._state = SessionState.AWAITING_WAREHOUSE
        self._warehouse_id: Optional[str] = None
        self._warehouse_name: Optional[str] = None
        self._ledger = Ledger()
        self._transition_history: List[SessionTransition] = []

        logger.info(f"Session created for {self.iso_date} (week {self.week_number})")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def iso_date(self) -> str:
        return self._calendar.iso_date

    @property
    def week_number(self) -> int:
        return self._calendar.week_number

    @property
    def warehouse_id(self) -> Optional[str]:
        return self._warehouse_id

    @property
    def warehouse_name(self) -> Optional[str]:
        return self._warehouse_name

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def items(self):
        return self._ledger.snapshot()

    @property
    def transition_history(self) -> List[SessionTransition]:
        """Get immutable copy of transition history"""
        return self._transition_history.copy()

    @property
    def is_scanning(self) -> bool:
        return self._scan_controller is not None and self._scan_controller.is_active

    def header(self) -> SessionHeader:
        self._require(SessionState.REGISTERING, "build export header")
        return SessionHeader(
            iso_date=self.iso_date,
            week_number=self.week_number,
            warehouse_id=self._warehouse_id,
            warehouse_name=self._warehouse_name,
        )

    # Commands

    def select_warehouse(self, warehouse_id: Optional[str], warehouse_name: Optional[str] = None) -> None:
        """Start registering for a warehouse"""
        self._require(SessionState.AWAITING_WAREHOUSE, "select warehouse")
        warehouse_id = (warehouse_id or "").strip()
        if not warehouse_id:
            raise InvalidStateError("Cannot start a round without a warehouse")

        self._warehouse_id = warehouse_id
        self._warehouse_name = (warehouse_name or "").strip() or None
        self._transition(SessionState.REGISTERING, "select_warehouse")
        logger.info(f"Round started: {warehouse_id}, week {self.week_number}, {self.iso_date}")

    def add_item(self, article_number: Any, quantity: Any, comment: Optional[str] = "") -> int:
        self._require(SessionState.REGISTERING, "add item")
        index = self._ledger.append(article_number, quantity, comment)
        logger.info(f"Item #{index} registered ({len(self._ledger)} total)")
        return index

    def edit_item(self, index: int, **fields: Any) -> CountItem:
        self._require(SessionState.REGISTERING, "edit item")
        return self._ledger.update(index, **fields)

    def remove_item(self, index: int) -> CountItem:
        self._require(SessionState.REGISTERING, "remove item")
        return self._ledger.remove(index)

    def finish(self, confirm_new_round: Confirm) -> CsvExport:
        """
        Export the round, then offer a new round

        The export is produced and handed to the export handler before
        ``confirm_new_round`` is asked. Declining keeps the items in place.

        Raises:
            InvalidStateError: If no round is in progress
            EmptyLedgerError: If nothing has been registered
        """
        export = self.export_round()
        if confirm_new_round():
            self._start_new_round("finish")
        return export

    def export_round(self) -> CsvExport:
        """
        Serialize the round and hand it to the export handler

        The session stays in REGISTERING; ``start_new_round`` completes a
        finish once the operator has answered.
        """
        self._require(SessionState.REGISTERING, "finish round")
        if self._ledger.is_empty:
            raise EmptyLedgerError("Nothing to export")

        export = serialize_session(self.header(), self._ledger.snapshot())
        if self._export_handler is not None:
            self._export_handler(export)
        logger.info(f"Exported {export.item_count} items to {export.filename}")
        return export

    def start_new_round(self) -> None:
        """Leave a finished round and return to warehouse selection"""
        self._require(SessionState.REGISTERING, "start new round")
        self._start_new_round("finish")

    def discard(self, confirm: Confirm) -> bool:
        """
        Drop the current round

        An empty round is left without asking. Exports already produced are
        values and are not affected.

        Returns:
            True if the session went back to warehouse selection
        """
        self._require(SessionState.REGISTERING, "discard round")
        if not self._ledger.is_empty and not confirm():
            return False

        self._start_new_round("discard")
        logger.info("Round discarded")
        return True

    async def start_scan(self, on_captured: Callable[[str], None],
                         on_error: Optional[Callable[[Exception], None]] = None) -> bool:
        """Begin a barcode scan for the article number field"""
        self._require(SessionState.REGISTERING, "scan barcode")
        if self._scan_controller is None:
            raise UnsupportedCapabilityError("No barcode scanner configured")
        return await self._scan_controller.start(on_captured, on_error)

    def cancel_scan(self) -> None:
        if self._scan_controller is not None:
            self._scan_controller.cancel()

    # Internals

    def _start_new_round(self, reason: str) -> None:
        self.cancel_scan()
        self._ledger.clear()
        self._warehouse_id = None
        self._warehouse_name = None
        self._transition(SessionState.AWAITING_WAREHOUSE, reason)

    def _transition(self, target: SessionState, reason: str) -> None:
        transition = SessionTransition(
            from_state=self._state,
            to_state=target,
            timestamp=self._clock.now(),
            reason=reason,
            warehouse_id=self._warehouse_id,
        )
        self._state = target
        self._transition_history.append(transition)

    def _require(self, state: SessionState, action: str) -> None:
        if self._state != state:
            raise InvalidStateError(f"Cannot {action} in state {self._state.value}")

"""
Command Handler - Operator Command Processing

Parses console commands, routes them to the count round use case and turns
the outcome into a structured response. No business logic lives here; every
domain error becomes an unsuccessful response carrying its user message, so
a failed command never ends the program.

Positions are shown to the operator starting at 1 and converted to ledger
indices here.
"""

import logging
import shlex
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from ...domain.errors import CountSessionError, OutOfRangeError
from ...domain.value_objects.session_state import SessionState
from ..use_cases.count_round import CountRoundUseCase

logger = logging.getLogger(__name__)

SCANNED_PLACEHOLDER = "@"


class CommandType(Enum):
    """Available operator commands"""
    WAREHOUSES = "lagre"
    START = "start"
    ADD = "add"
    EDIT = "edit"
    REMOVE = "rm"
    LIST = "list"
    SCAN = "scan"
    CANCEL = "cancel"
    FINISH = "finish"
    DISCARD = "discard"
    STATUS = "status"
    HELP = "help"


class CommandRequest(BaseModel):
    """Parsed command"""
    command_type: CommandType
    arguments: List[str] = Field(default_factory=list)


class CommandResponse(BaseModel):
    """Structured command response"""
    success: bool = Field(description="Whether command succeeded")
    message: str = Field(default="", description="Text for the operator")
    data: Dict[str, Any] = Field(default_factory=dict, description="Response data")
    error_code: Optional[str] = Field(None, description="Error class name if command failed")
    timestamp: float = Field(default_factory=time.time, description="Response timestamp")


HELP_TEXT = "\n".join([
    "lagre                              list selectable warehouses",
    "start <lager-id>                   start a round",
    "add <artnr|@> <antall> [kommentar] register an item (@ = last scan)",
    "edit <nr> [artnr=..] [antall=..] [kommentar=..]",
    "rm <nr>                            remove an item",
    "list                               show registered items",
    "scan / cancel                      scan a barcode / stop scanning",
    "finish                             export CSV",
    "discard                            delete the round",
    "status                             show session status",
    "quit                               exit",
])

EDIT_FIELD_ALIASES = {
    "artnr": "article_number",
    "antall": "quantity",
    "kommentar": "comment",
}


class CommandHandler:
    """Routes operator commands to the count round use case"""

    def __init__(
        self,
        use_case: CountRoundUseCase,
        confirm: Callable[[str], Awaitable[bool]],
        notify: Callable[[str], None] = print,
    ):
        """
        Args:
            use_case: Count round orchestration
            confirm: Asks the operator a yes/no question without blocking the event loop
            notify: Delivers asynchronous messages (scan results) to the operator
        """
        self.use_case = use_case
        self._confirm = confirm
        self._notify = notify
        self.scanned_article_number: Optional[str] = None

        self._routes = {
            CommandType.WAREHOUSES: self._handle_warehouses,
            CommandType.START: self._handle_start,
            CommandType.ADD: self._handle_add,
            CommandType.EDIT: self._handle_edit,
            CommandType.REMOVE: self._handle_remove,
            CommandType.LIST: self._handle_list,
            CommandType.SCAN: self._handle_scan,
            CommandType.CANCEL: self._handle_cancel,
            CommandType.FINISH: self._handle_finish,
            CommandType.DISCARD: self._handle_discard,
            CommandType.STATUS: self._handle_status,
            CommandType.HELP: self._handle_help,
        }

    @staticmethod
    def parse(line: str) -> CommandRequest:
        tokens = shlex.split(line)
        if not tokens:
            raise ValueError("Empty command")
        return CommandRequest(command_type=CommandType(tokens[0].lower()), arguments=tokens[1:])

    async def handle_line(self, line: str) -> CommandResponse:
        try:
            request = self.parse(line)
        except ValueError as e:
            return self._error_response(f"Ukjent kommando: {line.strip()!r}. Skriv 'help'.", e)
        return await self.handle_command(request)

    async def handle_command(self, request: CommandRequest) -> CommandResponse:
        try:
            return await self._routes[request.command_type](request.arguments)
        except CountSessionError as e:
            logger.warning(f"Command {request.command_type.value} failed: {e}")
            return self._error_response(e.user_message, e)

    # Routes

    async def _handle_warehouses(self, args: List[str]) -> CommandResponse:
        warehouses = await self.use_case.load_warehouses()
        lines = [f"{w.id}: {w.name}" for w in warehouses]
        return CommandResponse(
            success=True,
            message="\n".join(lines),
            data={"warehouses": [w.model_dump() for w in warehouses]},
        )

    async def _handle_start(self, args: List[str]) -> CommandResponse:
        if not args:
            return self._usage("start <lager-id>")
        warehouse = self.use_case.start_round(args[0])
        self.scanned_article_number = None
        session = self.use_case.session
        return CommandResponse(
            success=True,
            message=f"Aktivt lager: {warehouse.name}, uke {session.week_number} ({session.iso_date})",
            data={"warehouse_id": warehouse.id, "week_number": session.week_number},
        )

    async def _handle_add(self, args: List[str]) -> CommandResponse:
        if len(args) < 2:
            return self._usage("add <artnr|@> <antall> [kommentar]")
        article_number = args[0]
        if article_number == SCANNED_PLACEHOLDER:
            article_number = self.scanned_article_number or ""
        comment = " ".join(args[2:])

        index = self.use_case.add_item(article_number, args[1], comment)
        self.scanned_article_number = None
        item = self.use_case.session.ledger[index]
        return CommandResponse(
            success=True,
            message=f"{index + 1}. {item.article_number} – {item.quantity} stk",
            data={"position": index + 1, "item": item.model_dump()},
        )

    async def _handle_edit(self, args: List[str]) -> CommandResponse:
        if len(args) < 2:
            return self._usage("edit <nr> [artnr=..] [antall=..] [kommentar=..]")
        index = self._parse_position(args[0])

        fields = {}
        for assignment in args[1:]:
            key, sep, value = assignment.partition("=")
            if not sep or key.lower() not in EDIT_FIELD_ALIASES:
                return self._usage("edit <nr> [artnr=..] [antall=..] [kommentar=..]")
            fields[EDIT_FIELD_ALIASES[key.lower()]] = value

        item = self.use_case.edit_item(index, **fields)
        return CommandResponse(
            success=True,
            message=f"{index + 1}. {item.article_number} – {item.quantity} stk",
            data={"position": index + 1, "item": item.model_dump()},
        )

    async def _handle_remove(self, args: List[str]) -> CommandResponse:
        if not args:
            return self._usage("rm <nr>")
        index = self._parse_position(args[0])
        if not await self._confirm("Slett denne varen?"):
            return CommandResponse(success=True, message="Avbrutt")
        item = self.use_case.remove_item(index)
        return CommandResponse(
            success=True,
            message=f"Slettet {item.article_number}",
            data={"item": item.model_dump()},
        )

    async def _handle_list(self, args: List[str]) -> CommandResponse:
        items = self.use_case.session.items
        lines = []
        for position, item in enumerate(items, start=1):
            line = f"{position}. {item.article_number} – {item.quantity} stk"
            if item.comment:
                line += f" ({item.comment})"
            lines.append(line)
        return CommandResponse(
            success=True,
            message="\n".join(lines) or "Ingen varer registrert",
            data={"items": [item.model_dump() for item in items]},
        )

    async def _handle_scan(self, args: List[str]) -> CommandResponse:
        started = await self.use_case.start_scan(self._on_scanned, self._on_scan_error)
        if not started:
            return CommandResponse(success=True, message="Skanning pågår allerede")
        return CommandResponse(success=True, message="Skanner... ('cancel' for å avbryte)")

    async def _handle_cancel(self, args: List[str]) -> CommandResponse:
        self.use_case.cancel_scan()
        return CommandResponse(success=True, message="Skanning avbrutt")

    async def _handle_finish(self, args: List[str]) -> CommandResponse:
        export = await self.use_case.finish_round(lambda: self._confirm("Vil du starte en ny runde?"))
        self._forget_scan_if_round_ended()
        return CommandResponse(
            success=True,
            message=f"Eksportert {export.item_count} varer til {export.filename}",
            data={"filename": export.filename, "item_count": export.item_count},
        )

    async def _handle_discard(self, args: List[str]) -> CommandResponse:
        discarded = await self.use_case.discard_round(lambda: self._confirm(
            "Er du sikker på at du vil slette denne runden?\n"
            "Alle registrerte varer vil bli fjernet (dette påvirker ikke tidligere nedlastede CSV-filer)."
        ))
        self._forget_scan_if_round_ended()
        return CommandResponse(
            success=True,
            message="Runde slettet" if discarded else "Avbrutt",
            data={"discarded": discarded},
        )

    async def _handle_status(self, args: List[str]) -> CommandResponse:
        session = self.use_case.session
        data = {
            "state": session.state.value,
            "iso_date": session.iso_date,
            "week_number": session.week_number,
            "warehouse_id": session.warehouse_id,
            "warehouse_name": session.warehouse_name,
            "item_count": len(session.ledger),
            "scanning": session.is_scanning,
        }
        if session.state == SessionState.AWAITING_WAREHOUSE:
            message = f"Velg lager. Dato {session.iso_date}, uke {session.week_number}"
        else:
            message = (f"Lager {session.warehouse_name or session.warehouse_id}, uke {session.week_number}, "
                       f"{len(session.ledger)} varer")
        return CommandResponse(success=True, message=message, data=data)

    async def _handle_help(self, args: List[str]) -> CommandResponse:
        return CommandResponse(success=True, message=HELP_TEXT)

    # Scan callbacks

    def _on_scanned(self, value: str) -> None:
        self.scanned_article_number = value
        self._notify(f"Skannet: {value} (bruk 'add @ <antall>')")

    def _on_scan_error(self, error: Exception) -> None:
        self._notify(getattr(error, "user_message", str(error)))

    # Helpers

    def _forget_scan_if_round_ended(self) -> None:
        if self.use_case.session.state == SessionState.AWAITING_WAREHOUSE:
            self.scanned_article_number = None

    @staticmethod
    def _parse_position(text: str) -> int:
        try:
            return int(text) - 1
        except ValueError as e:
            raise OutOfRangeError(f"Not a position: {text!r}") from e

    @staticmethod
    def _usage(usage: str) -> CommandResponse:
        return CommandResponse(success=False, message=f"Bruk: {usage}", error_code="UsageError")

    @staticmethod
    def _error_response(message: str, error: Exception) -> CommandResponse:
        return CommandResponse(success=False, message=message, error_code=type(error).__name__)

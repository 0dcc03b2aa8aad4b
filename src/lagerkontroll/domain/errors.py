"""
Domain Errors for the Stock-Count Session Engine

Every failure the engine reports is recoverable: the session and ledger are
left exactly as they were before the failed command, and the presentation
layer shows ``user_message`` to the operator.
"""

from typing import Optional


class CountSessionError(Exception):
    """Base class for all stock-count session errors"""

    user_message = "Noe gikk galt"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class ValidationError(CountSessionError):
    """A required item field was empty after trimming"""

    user_message = "Artikkelnummer og antall må fylles ut"


class InvalidStateError(CountSessionError):
    """Command attempted from a state that does not allow it"""

    user_message = "Handlingen er ikke tillatt nå"


class OutOfRangeError(CountSessionError):
    """Ledger position does not exist"""

    user_message = "Varen finnes ikke i listen"


class EmptyLedgerError(CountSessionError):
    """Finish attempted with no registered items"""

    user_message = "Ingen varer registrert ennå"


class UnsupportedCapabilityError(CountSessionError):
    """Runtime lacks barcode detection support"""

    user_message = "Strekkodeskanner støttes ikke på denne enheten"


class AcquisitionError(CountSessionError):
    """Camera could not be opened or failed while scanning"""

    user_message = "Kunne ikke starte kamera. Sjekk tillatelser."


class ExportWriteError(CountSessionError):
    """Export could not be written to its destination"""

    user_message = "Kunne ikke lagre CSV-filen"


class WarehouseLoadError(CountSessionError):
    """Warehouse list is missing, unreadable or has no active entries"""

    user_message = "Kunne ikke laste lagre. Sjekk at data/lagre.json finnes."

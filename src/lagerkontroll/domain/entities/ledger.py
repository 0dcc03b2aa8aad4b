"""
Ledger Entity - ordered collection of counted items

Positions are plain 0-based list indices. Removing an item shifts every later
item down by one, so callers must re-read positions after each mutation
instead of keeping old indices around.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..errors import OutOfRangeError, ValidationError
from ..value_objects.count_item import CountItem

logger = logging.getLogger(__name__)


def _build_item(article_number: Any, quantity: Any, comment: Optional[str]) -> CountItem:
    try:
        return CountItem(
            article_number="" if article_number is None else article_number,
            quantity="" if quantity is None else quantity,
            comment=comment or "",
        )
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationError(f"Invalid item fields: {', '.join(fields)}") from e


class Ledger:
    """In-memory, insertion-ordered list of CountItem"""

    def __init__(self):
        self._items: List[CountItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CountItem]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> CountItem:
        self._check_index(index)
        return self._items[index]

    @property
    def is_empty(self) -> bool:
        return not self._items

    def append(self, article_number: Any, quantity: Any, comment: Optional[str] = "") -> int:
        """
        Add an item at the end of the ledger

        Returns:
            Position of the new item

        Raises:
            ValidationError: If article number or quantity is empty after trimming
        """
        item = _build_item(article_number, quantity, comment)
        self._items.append(item)
        index = len(self._items) - 1
        logger.debug(f"Ledger append #{index}: {item.article_number} x {item.quantity}")
        return index

    def update(self, index: int, **fields: Any) -> CountItem:
        """
        Replace the item at ``index``, keeping fields that are not given

        Raises:
            OutOfRangeError: If index is not a current position
            ValidationError: If the merged item would have an empty required field
        """
        self._check_index(index)
        unknown = set(fields) - set(CountItem.model_fields)
        if unknown:
            raise ValidationError(f"Unknown item fields: {', '.join(sorted(unknown))}")

        merged = {**self._items[index].model_dump(), **fields}
        item = _build_item(merged["article_number"], merged["quantity"], merged["comment"])
        self._items[index] = item
        logger.debug(f"Ledger update #{index}: {item.article_number} x {item.quantity}")
        return item

    def remove(self, index: int) -> CountItem:
        """
        Remove the item at ``index``; later items shift down by one

        Raises:
            OutOfRangeError: If index is not a current position
        """
        self._check_index(index)
        item = self._items.pop(index)
        logger.debug(f"Ledger remove #{index}: {item.article_number}")
        return item

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> Tuple[CountItem, ...]:
        """Read-only copy of the current items in order"""
        return tuple(self._items)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._items):
            raise OutOfRangeError(f"No item at position {index!r} (ledger size {len(self._items)})")

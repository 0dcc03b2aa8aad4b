"""Counted item value object"""

from pydantic import BaseModel, Field


class CountItem(BaseModel):
    """
    One counted article entry.

    Whitespace is stripped on construction and both required fields must be
    non-empty afterwards. Quantity is kept as text so locale-formatted values
    ("1,5") reach the export untouched.
    """

    article_number: str = Field(min_length=1, description="Article number as entered or scanned")
    quantity: str = Field(min_length=1, description="Counted quantity, stored verbatim")
    comment: str = Field(default="", description="Optional free-text comment")

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
        "coerce_numbers_to_str": True,
    }

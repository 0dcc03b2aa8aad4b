"""Warehouse value object"""

from pydantic import AliasChoices, BaseModel, Field


class Warehouse(BaseModel):
    """
    Warehouse entry from the static warehouse list.

    Accepts both the English keys (``name``/``active``) and the Norwegian keys
    used by ``lagre.json`` (``navn``/``aktiv``). An entry without the flag is
    inactive.
    """

    id: str = Field(min_length=1, description="Warehouse identifier written to the export")
    name: str = Field(
        validation_alias=AliasChoices("name", "navn"),
        description="Display name shown to the operator",
    )
    active: bool = Field(
        default=False,
        validation_alias=AliasChoices("active", "aktiv"),
        description="Only entries flagged active can be selected",
    )

    model_config = {"frozen": True, "str_strip_whitespace": True, "coerce_numbers_to_str": True}

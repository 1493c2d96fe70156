"""Listing filter object shared by search, alerts and the chat assistant."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ListingFilters(BaseModel):
    """Optional named constraints over listing fields.

    Every field is declared up front; ``None`` means the constraint is not
    set. Input accepts snake_case or camelCase keys and drops unknown keys,
    since the assistant's language model is free to answer either way.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    make: str | None = None
    model: str | None = None
    min_price: int | None = Field(default=None, ge=0)
    max_price: int | None = Field(default=None, ge=0)
    min_year: int | None = Field(default=None, ge=1900)
    max_year: int | None = Field(default=None, ge=1900)
    fuel_type: str | None = None
    transmission: str | None = None
    max_mileage: int | None = Field(default=None, ge=0)
    location: str | None = None
    body_type: str | None = None
    color: str | None = None

    def as_dict(self) -> dict[str, str | int]:
        """Only the constraints that are set, keyed by field name."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.as_dict()

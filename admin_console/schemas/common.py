"""Shared schema base classes and pagination."""

from typing import Any

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ConsoleModel(BaseModel):
    """Base for view models.

    Built from the backend's snake_case JSON, serialized as camelCase.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel),
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_null_optionals(cls, data: Any) -> Any:
        """An explicit null on the wire falls back to the field default."""
        if not isinstance(data, dict):
            return data
        required = {name for name, field in cls.model_fields.items() if field.is_required()}
        return {key: value for key, value in data.items() if value is not None or key in required}


class Pagination(ConsoleModel):
    """Pagination metadata for list responses."""

    page: int = 1
    limit: int = 20
    total: int = 0
    total_pages: int = Field(default=0, validation_alias=AliasChoices("total_pages", "totalPages"))
    has_next_page: bool | None = Field(default=None, validation_alias=AliasChoices("has_next_page", "hasNextPage"))
    has_previous_page: bool | None = Field(
        default=None, validation_alias=AliasChoices("has_previous_page", "hasPreviousPage")
    )

    @model_validator(mode="after")
    def derive_navigation_flags(self) -> "Pagination":
        if self.has_next_page is None:
            self.has_next_page = self.page < self.total_pages
        if self.has_previous_page is None:
            self.has_previous_page = self.page > 1
        return self

    @classmethod
    def from_wire(cls, data: dict[str, Any] | None) -> "Pagination":
        return cls.model_validate({key: value for key, value in (data or {}).items() if value is not None})

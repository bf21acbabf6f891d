"""GraphQL client models for the Todo schema."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OrderDirection(str, Enum):
    """Direction in which to order a list of items."""

    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value

    def marshal_gql(self) -> str:
        """Return the quoted GraphQL literal for this direction."""
        return json.dumps(self.value)


def order_direction_from_gql(value: Any) -> OrderDirection:
    """Parse a GraphQL enum value into an :class:`OrderDirection`."""
    if not isinstance(value, str):
        raise TypeError("enums must be strings")
    try:
        return OrderDirection(value)
    except ValueError:
        raise ValueError(f"{value} is not a valid OrderDirection") from None


def _json(name: str, *, omitempty: bool = False, default: Any = None) -> Any:
    return field(default=default, metadata={"json": name, "omitempty": omitempty})


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple, dict)) and not value)


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {}
        for model_field in dataclasses.fields(value):
            item = getattr(value, model_field.name)
            if model_field.metadata.get("omitempty") and _is_empty(item):
                continue
            result[model_field.metadata.get("json", model_field.name)] = _encode(item)
        return result
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


@dataclass
class PageInfo:
    """Pagination state of a connection."""

    has_next_page: bool = _json("hasNextPage", default=False)
    has_previous_page: bool = _json("hasPreviousPage", default=False)
    start_cursor: str | None = _json("startCursor", omitempty=True)
    end_cursor: str | None = _json("endCursor", omitempty=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class Todo:
    """A todo item."""

    id: str = _json("id", default="")
    name: str = _json("name", default="")
    description: str | None = _json("description", omitempty=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class CreateTodoInput:
    """Input for creating a todo."""

    name: str = _json("name", default="")
    description: str | None = _json("description", omitempty=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class UpdateTodoInput:
    """Input for updating a todo."""

    name: str | None = _json("name", omitempty=True)
    description: str | None = _json("description", omitempty=True)
    clear_description: bool | None = _json("clearDescription", omitempty=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class TodoWhereInput:
    """Filter for todo queries."""

    not_: TodoWhereInput | None = _json("not", omitempty=True)
    and_: list[TodoWhereInput] | None = _json("and", omitempty=True)
    or_: list[TodoWhereInput] | None = _json("or", omitempty=True)

    id: str | None = _json("id", omitempty=True)
    id_neq: str | None = _json("idNEQ", omitempty=True)
    id_in: list[str] | None = _json("idIn", omitempty=True)
    id_not_in: list[str] | None = _json("idNotIn", omitempty=True)
    id_gt: str | None = _json("idGT", omitempty=True)
    id_gte: str | None = _json("idGTE", omitempty=True)
    id_lt: str | None = _json("idLT", omitempty=True)
    id_lte: str | None = _json("idLTE", omitempty=True)
    id_equal_fold: str | None = _json("idEqualFold", omitempty=True)
    id_contains_fold: str | None = _json("idContainsFold", omitempty=True)

    name: str | None = _json("name", omitempty=True)
    name_neq: str | None = _json("nameNEQ", omitempty=True)
    name_in: list[str] | None = _json("nameIn", omitempty=True)
    name_not_in: list[str] | None = _json("nameNotIn", omitempty=True)
    name_gt: str | None = _json("nameGT", omitempty=True)
    name_gte: str | None = _json("nameGTE", omitempty=True)
    name_lt: str | None = _json("nameLT", omitempty=True)
    name_lte: str | None = _json("nameLTE", omitempty=True)
    name_contains: str | None = _json("nameContains", omitempty=True)
    name_has_prefix: str | None = _json("nameHasPrefix", omitempty=True)
    name_has_suffix: str | None = _json("nameHasSuffix", omitempty=True)
    name_equal_fold: str | None = _json("nameEqualFold", omitempty=True)
    name_contains_fold: str | None = _json("nameContainsFold", omitempty=True)

    description: str | None = _json("description", omitempty=True)
    description_neq: str | None = _json("descriptionNEQ", omitempty=True)
    description_in: list[str] | None = _json("descriptionIn", omitempty=True)
    description_not_in: list[str] | None = _json("descriptionNotIn", omitempty=True)
    description_gt: str | None = _json("descriptionGT", omitempty=True)
    description_gte: str | None = _json("descriptionGTE", omitempty=True)
    description_lt: str | None = _json("descriptionLT", omitempty=True)
    description_lte: str | None = _json("descriptionLTE", omitempty=True)
    description_contains: str | None = _json("descriptionContains", omitempty=True)
    description_has_prefix: str | None = _json("descriptionHasPrefix", omitempty=True)
    description_has_suffix: str | None = _json("descriptionHasSuffix", omitempty=True)
    description_is_nil: bool | None = _json("descriptionIsNil", omitempty=True)
    description_not_nil: bool | None = _json("descriptionNotNil", omitempty=True)
    description_equal_fold: str | None = _json("descriptionEqualFold", omitempty=True)
    description_contains_fold: str | None = _json("descriptionContainsFold", omitempty=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class TodoCreatePayload:
    """Result of the createTodo mutation."""

    todo: Todo | None = _json("todo")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class TodoUpdatePayload:
    """Result of the updateTodo mutation."""

    todo: Todo | None = _json("todo")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)


@dataclass
class TodoDeletePayload:
    """Result of the deleteTodo mutation."""

    deleted_id: str = _json("deletedID", default="")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty optional fields."""
        return _encode(self)
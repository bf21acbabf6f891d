"""Collect environment-variable descriptions from configuration dataclasses.

Fields are described through ``dataclasses.field(metadata=...)``. The metadata
mapping plays the role of struct tags: the configured tag name (``koanf`` by
default) gives the variable name, ``json`` names nested sections and
``embedded`` marks a nested dataclass whose fields belong to the parent.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Mapping, Optional

EMBEDDED = "embedded"


class InvalidSpecificationError(TypeError):
    """Raised when the specification is not a dataclass instance."""

    def __init__(self, message: str = "specification must be a dataclass instance") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class VarInfo:
    """One configuration variable: its field name, dotted path, env key, type and tags."""

    field_name: str
    full_path: str
    key: str
    type: Any
    tags: Mapping[str, Any] = field(default_factory=dict)

    def tag(self, name: str) -> str:
        """Return the tag value for ``name``, or an empty string when absent."""
        value = self.tags.get(name)
        return "" if value is None else str(value)


def _unwrap_optional(hint: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` / ``X | None``; other hints unchanged."""
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


_NAMED_TYPES: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "timedelta": timedelta,
    "datetime.timedelta": timedelta,
    "Any": Any,
    "typing.Any": Any,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "None": type(None),
}

_GENERICS: dict[str, type] = {
    "list": list,
    "List": list,
    "typing.List": list,
    "Sequence": list,
    "typing.Sequence": list,
    "collections.abc.Sequence": list,
    "tuple": tuple,
    "Tuple": tuple,
    "typing.Tuple": tuple,
    "dict": dict,
    "Dict": dict,
    "typing.Dict": dict,
    "Mapping": dict,
    "typing.Mapping": dict,
    "collections.abc.Mapping": dict,
}


def _split_top(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator`` where it is not inside brackets."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def _resolve_annotation(text: str) -> Any:
    """Turn a textual annotation of common shapes into a type; unknown names stay text."""
    text = text.strip()
    parts = _split_top(text, "|")
    if len(parts) > 1:
        rest = [part for part in parts if part != "None"]
        if len(rest) != 1:
            return text
        inner = _resolve_annotation(rest[0])
        return text if isinstance(inner, str) else Optional[inner]

    if "[" in text and text.endswith("]"):
        base, inner_text = text.split("[", 1)
        base = base.strip()
        args = [_resolve_annotation(arg) for arg in _split_top(inner_text[:-1], ",")]
        if base in ("Optional", "typing.Optional") and len(args) == 1:
            return text if isinstance(args[0], str) else Optional[args[0]]
        generic = _GENERICS.get(base)
        if generic is list and len(args) == 1:
            return list[args[0]]
        if generic is tuple and args:
            return tuple[tuple(args)]
        if generic is dict and len(args) == 2:
            return dict[args[0], args[1]]
        return text

    return _NAMED_TYPES.get(text, text)


def _field_type(spec_field: dataclasses.Field) -> Any:
    """Return the type of a dataclass field, resolving textual annotations where possible."""
    annotation = spec_field.type
    resolved = _resolve_annotation(annotation) if isinstance(annotation, str) else annotation
    if isinstance(_unwrap_optional(resolved), str):
        factory = spec_field.default_factory
        if isinstance(factory, type) and dataclasses.is_dataclass(factory):
            return factory
        default = spec_field.default
        if dataclasses.is_dataclass(default) and not isinstance(default, type):
            return type(default)
    return resolved


def _is_dataclass_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


@dataclass(frozen=True)
class EnvParseConfig:
    """Settings for walking a configuration dataclass."""

    field_tag_name: str = "koanf"
    skipper: str = "-"

    def gather_env_info(self, prefix: str, spec: Any) -> list[VarInfo]:
        """Describe every tagged leaf field of ``spec``, recursing into nested dataclasses."""
        if isinstance(spec, type) or not dataclasses.is_dataclass(spec):
            raise InvalidSpecificationError()
        return self._gather(prefix, type(spec))

    def _field_name(self, spec_field: dataclasses.Field) -> str:
        name = spec_field.metadata.get(self.field_tag_name)
        if name:
            return str(name)
        return self.skipper

    def _gather(self, prefix: str, cls: type) -> list[VarInfo]:
        infos: list[VarInfo] = []

        for spec_field in dataclasses.fields(cls):
            if spec_field.name.startswith("_"):
                continue

            field_name = self._field_name(spec_field)
            if field_name == self.skipper:
                continue

            hint = _field_type(spec_field)
            key = field_name
            full_path = spec_field.name
            if prefix:
                key = f"{prefix}_{field_name}"
                full_path = f"{prefix.replace('_', '.').lower()}.{field_name}"

            target = _unwrap_optional(hint)
            if _is_dataclass_type(target):
                if spec_field.metadata.get(EMBEDDED):
                    inner_prefix = prefix
                else:
                    inner_prefix = f"{prefix}_{spec_field.metadata.get('json', '')}"
                infos.extend(self._gather(inner_prefix, target))
                continue

            infos.append(
                VarInfo(
                    field_name=field_name,
                    full_path=full_path,
                    key=key.upper(),
                    type=hint,
                    tags=dict(spec_field.metadata),
                )
            )

        return infos
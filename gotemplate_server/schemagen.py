"""Generate JSON schema, YAML defaults, env file and config map from a config dataclass."""

from __future__ import annotations

import collections.abc
import dataclasses
import json
import os
import re
import typing
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import yaml

from .envparse import EnvParseConfig, VarInfo, _field_type, _unwrap_optional

TAG_NAME = "koanf"
SKIPPER = "-"
DEFAULT_TAG = "default"
VAR_PREFIX = "DATUM"
OWNER_READ_WRITE = 0o600
SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


@dataclass(frozen=True)
class SchemaPaths:
    """Where the generated files are written and where the config map header is read."""

    json_schema: str = "./jsonschema/datum.config.json"
    yaml_config: str = "./config/config.example.yaml"
    env_config: str = "./config/.env.example"
    config_map: str = "./config/configmap.yaml"
    configmap_template: str = "./jsonschema/templates/configmap.tmpl"


def _is_sequence_type(hint: Any) -> bool:
    if hint in (list, tuple):
        return True
    return typing.get_origin(hint) in (list, tuple, collections.abc.Sequence)


def _is_quoted_scalar(hint: Any) -> bool:
    return hint is str or hint is int or hint is timedelta


def render_env(infos: Iterable[VarInfo], default_tag: str = DEFAULT_TAG) -> str:
    """Render ``KEY="default"`` lines for every variable."""
    return "".join(f'{info.key}="{info.tag(default_tag)}"\n' for info in infos)


def render_configmap(infos: Iterable[VarInfo], default_tag: str = DEFAULT_TAG) -> str:
    """Render the data entries of a config map template, one per variable."""
    parts = ["\n"]
    for info in infos:
        default = info.tag(default_tag)
        if not default:
            parts.append(f"  {info.key}: {{{{ .Values.{info.full_path} }}}}\n")
            continue

        if _is_quoted_scalar(info.type):
            default = f'"{default}"'
        elif _is_sequence_type(info.type):
            default = '"' + default.replace("[", "", 1).replace("]", "", 1) + '"'

        parts.append(f"  {info.key}: {{{{ .Values.{info.full_path} | default {default} }}}}\n")
    return "".join(parts)


def _type_name(cls: type) -> str:
    module = cls.__module__.rsplit(".", 1)[-1]
    return f"{module}.{cls.__qualname__}"


def _type_schema(hint: Any, defs: dict[str, Any]) -> dict[str, Any]:
    hint = _unwrap_optional(hint)

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        name = _type_name(hint)
        if name not in defs:
            defs[name] = {}
            defs[name] = _object_schema(hint, defs)
        return {"$ref": f"#/$defs/{name}"}

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if hint in (list, tuple) or origin in (list, tuple, collections.abc.Sequence):
        schema: dict[str, Any] = {"type": "array"}
        if args:
            schema["items"] = _type_schema(args[0], defs)
        return schema
    if hint is dict or origin in (dict, collections.abc.Mapping):
        schema = {"type": "object"}
        if len(args) == 2:
            schema["additionalProperties"] = _type_schema(args[1], defs)
        return schema
    if isinstance(hint, type):
        if issubclass(hint, bool):
            return {"type": "boolean"}
        if issubclass(hint, Enum):
            return {"enum": [member.value for member in hint]}
        if issubclass(hint, str):
            return {"type": "string"}
        if issubclass(hint, int) or issubclass(hint, timedelta):
            return {"type": "integer"}
        if issubclass(hint, float):
            return {"type": "number"}
    return {}


def _object_schema(cls: type, defs: dict[str, Any]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []

    for spec_field in dataclasses.fields(cls):
        if spec_field.name.startswith("_"):
            continue
        name = spec_field.metadata.get(TAG_NAME) or spec_field.name
        if name == SKIPPER:
            continue

        prop = dict(_type_schema(_field_type(spec_field), defs))
        description = spec_field.metadata.get("description")
        if description:
            prop["description"] = description
        properties[name] = prop

        options = str(spec_field.metadata.get("jsonschema", "")).split(",")
        if "required" in (option.strip() for option in options):
            required.append(name)

    schema: dict[str, Any] = {
        "properties": properties,
        "additionalProperties": False,
        "type": "object",
    }
    if required:
        schema["required"] = required
    return schema


def json_schema(spec_type: type) -> dict[str, Any]:
    """Build a JSON schema for a configuration dataclass, with nested types under ``$defs``."""
    if not (isinstance(spec_type, type) and dataclasses.is_dataclass(spec_type)):
        raise TypeError("spec_type must be a dataclass type")
    defs: dict[str, Any] = {}
    schema: dict[str, Any] = {"$schema": SCHEMA_DIALECT}
    schema.update(_object_schema(spec_type, defs))
    if defs:
        schema["$defs"] = defs
    return schema


_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def _parse_duration(text: str) -> int:
    """Parse a duration such as ``1h30m`` into nanoseconds."""
    body = text.strip()
    sign = 1
    if body[:1] in "+-" and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return 0
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(body):
        if match.start() != position:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(body):
        raise ValueError(f"invalid duration {text!r}")
    return sign * int(round(total))


_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_default(text: str, hint: Any) -> Any:
    if hint is bool:
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"invalid boolean default {text!r}")
    if hint is int:
        return int(text)
    if hint is float:
        return float(text)
    if hint is timedelta:
        return _parse_duration(text)
    if _is_sequence_type(hint):
        args = typing.get_args(hint)
        inner = text.strip()
        if inner.startswith("["):
            inner = inner[1:]
        if inner.endswith("]"):
            inner = inner[:-1]
        items = [item.strip() for item in inner.split(",") if item.strip()]
        if args:
            return [_parse_default(item, args[0]) for item in items]
        return items
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(text).value
    return text


def _plain(value: Any) -> Any:
    if isinstance(value, timedelta):
        return (value // timedelta(microseconds=1)) * 1000
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _defaults_mapping(obj: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}

    for spec_field in dataclasses.fields(obj):
        if spec_field.name.startswith("_"):
            continue
        json_name = str(spec_field.metadata.get("json", "")).split(",")[0] or spec_field.name
        if json_name == "-":
            continue

        value = getattr(obj, spec_field.name)
        target = _unwrap_optional(_field_type(spec_field))

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            result[json_name] = _defaults_mapping(value)
            continue

        default = spec_field.metadata.get(DEFAULT_TAG)
        if not value and default:
            result[json_name] = _parse_default(str(default), target)
        else:
            result[json_name] = _plain(value)

    return result


def yaml_defaults(spec: Any) -> str:
    """Render ``spec`` as YAML, filling zero-valued fields from their ``default`` tag."""
    if isinstance(spec, type) or not dataclasses.is_dataclass(spec):
        raise TypeError("spec must be a dataclass instance")
    return yaml.safe_dump(_defaults_mapping(spec), sort_keys=True, default_flow_style=False, allow_unicode=True)


def _write(path: str, text: str) -> None:
    descriptor = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OWNER_READ_WRITE)
    with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
        handle.write(text)


def generate_schema(
    spec_type: type,
    paths: SchemaPaths | None = None,
    configmap_header: str | None = None,
) -> None:
    """Write the JSON schema, YAML example, env example and config map for ``spec_type``."""
    paths = paths or SchemaPaths()

    _write(paths.json_schema, json.dumps(json_schema(spec_type), indent=2, ensure_ascii=False))
    _write(paths.yaml_config, yaml_defaults(spec_type()))

    infos = EnvParseConfig(field_tag_name=TAG_NAME, skipper=SKIPPER).gather_env_info(VAR_PREFIX, spec_type())
    _write(paths.env_config, render_env(infos))

    if configmap_header is None:
        configmap_header = Path(paths.configmap_template).read_text(encoding="utf-8")
    _write(paths.config_map, configmap_header + render_configmap(infos))
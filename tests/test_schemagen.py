from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import timedelta

import pytest
import yaml

from gotemplate_server.envparse import EnvParseConfig, VarInfo
from gotemplate_server.schemagen import (
    SchemaPaths,
    generate_schema,
    json_schema,
    render_configmap,
    render_env,
    yaml_defaults,
)


@dataclass
class Server:
    listen: str = field(
        default="",
        metadata={
            "koanf": "listen",
            "json": "listen",
            "default": ":17608",
            "jsonschema": "required",
            "description": "listen address",
        },
    )
    debug: bool = field(default=False, metadata={"koanf": "debug", "json": "debug", "default": "false"})
    shutdown: timedelta = field(
        default=timedelta(0),
        metadata={"koanf": "shutdownGracePeriod", "json": "shutdownGracePeriod", "default": "10s"},
    )
    origins: list[str] = field(
        default_factory=list,
        metadata={"koanf": "allowOrigins", "json": "allowOrigins", "default": "[*]"},
    )


@dataclass
class AppConfig:
    refresh: timedelta = field(
        default=timedelta(0),
        metadata={"koanf": "refreshInterval", "json": "refreshInterval", "default": "10m"},
    )
    server: Server = field(default_factory=Server, metadata={"koanf": "server", "json": "server"})
    name: str = field(default="", metadata={"koanf": "name", "json": "name"})


@dataclass
class BadDuration:
    wait: timedelta = field(default=timedelta(0), metadata={"koanf": "wait", "json": "wait", "default": "ten"})


def _infos():
    return EnvParseConfig().gather_env_info("DATUM", AppConfig())


def test_render_env_one_line_per_variable():
    infos = _infos()
    text = render_env(infos)
    lines = text.splitlines()
    assert len(lines) == len(infos)
    assert 'DATUM_SERVER_LISTEN=":17608"' in lines
    assert 'DATUM_NAME=""' in lines


def test_render_configmap_entries():
    text = render_configmap(_infos())
    assert text.startswith("\n")
    lines = text.splitlines()
    assert '  DATUM_SERVER_LISTEN: {{ .Values.datum.server.listen | default ":17608" }}' in lines
    assert "  DATUM_SERVER_DEBUG: {{ .Values.datum.server.debug | default false }}" in lines
    assert '  DATUM_SERVER_ALLOWORIGINS: {{ .Values.datum.server.allowOrigins | default "*" }}' in lines
    assert '  DATUM_SERVER_SHUTDOWNGRACEPERIOD: {{ .Values.datum.server.shutdownGracePeriod | default "10s" }}' in lines
    assert "  DATUM_NAME: {{ .Values.datum.name }}" in lines


def test_render_configmap_custom_tag():
    info = VarInfo(field_name="port", full_path="datum.port", key="DATUM_PORT", type=int, tags={"fallback": "80"})
    assert render_configmap([info], "fallback") == '\n  DATUM_PORT: {{ .Values.datum.port | default "80" }}\n'


def test_json_schema_structure():
    schema = json_schema(AppConfig)
    assert set(schema["properties"]) == {"refreshInterval", "server", "name"}
    assert schema["additionalProperties"] is False
    assert schema["properties"]["refreshInterval"] == {"type": "integer"}

    ref = schema["properties"]["server"]["$ref"]
    name = ref.rsplit("/", 1)[-1]
    server = schema["$defs"][name]
    assert server["required"] == ["listen"]
    assert server["properties"]["listen"] == {"type": "string", "description": "listen address"}
    assert server["properties"]["debug"] == {"type": "boolean"}
    assert server["properties"]["allowOrigins"] == {"type": "array", "items": {"type": "string"}}


def test_json_schema_rejects_instances():
    with pytest.raises(TypeError):
        json_schema(AppConfig())


def test_yaml_defaults_fill_zero_values():
    loaded = yaml.safe_load(yaml_defaults(AppConfig()))
    assert loaded["server"]["listen"] == ":17608"
    assert loaded["server"]["allowOrigins"] == ["*"]
    assert loaded["server"]["debug"] is False
    assert loaded["refreshInterval"] == 60 * loaded["server"]["shutdownGracePeriod"]
    assert loaded["name"] == ""


def test_yaml_defaults_keep_set_values():
    spec = AppConfig(name="custom", server=Server(listen=":9000", origins=["a", "b"]))
    loaded = yaml.safe_load(yaml_defaults(spec))
    assert loaded["name"] == "custom"
    assert loaded["server"]["listen"] == ":9000"
    assert loaded["server"]["allowOrigins"] == ["a", "b"]


def test_yaml_defaults_set_timedelta_matches_parsed_default():
    from_default = yaml.safe_load(yaml_defaults(AppConfig()))
    explicit = yaml.safe_load(yaml_defaults(AppConfig(server=Server(shutdown=timedelta(seconds=10)))))
    assert explicit["server"]["shutdownGracePeriod"] == from_default["server"]["shutdownGracePeriod"]


def test_yaml_defaults_sorted_keys():
    text = yaml_defaults(AppConfig())
    top = [line.split(":")[0] for line in text.splitlines() if not line.startswith(" ")]
    assert top == sorted(top)


def test_yaml_defaults_bad_duration():
    with pytest.raises(ValueError):
        yaml_defaults(BadDuration())


def test_generate_schema_writes_all_files(tmp_path):
    paths = SchemaPaths(
        json_schema=str(tmp_path / "schema.json"),
        yaml_config=str(tmp_path / "config.yaml"),
        env_config=str(tmp_path / ".env"),
        config_map=str(tmp_path / "configmap.yaml"),
        configmap_template=str(tmp_path / "configmap.tmpl"),
    )
    header = "kind: ConfigMap\ndata:"
    (tmp_path / "configmap.tmpl").write_text(header, encoding="utf-8")

    generate_schema(AppConfig, paths)

    assert json.loads((tmp_path / "schema.json").read_text()) == json_schema(AppConfig)
    assert yaml.safe_load((tmp_path / "config.yaml").read_text()) == yaml.safe_load(yaml_defaults(AppConfig()))
    assert (tmp_path / ".env").read_text() == render_env(_infos())
    assert (tmp_path / "configmap.yaml").read_text() == header + render_configmap(_infos())


def test_generate_schema_explicit_header(tmp_path):
    paths = SchemaPaths(
        json_schema=str(tmp_path / "schema.json"),
        yaml_config=str(tmp_path / "config.yaml"),
        env_config=str(tmp_path / ".env"),
        config_map=str(tmp_path / "configmap.yaml"),
        configmap_template=str(tmp_path / "absent.tmpl"),
    )
    generate_schema(AppConfig, paths, configmap_header="header:")
    assert (tmp_path / "configmap.yaml").read_text().startswith("header:\n  DATUM_")


def test_generate_schema_missing_template(tmp_path):
    paths = SchemaPaths(
        json_schema=str(tmp_path / "schema.json"),
        yaml_config=str(tmp_path / "config.yaml"),
        env_config=str(tmp_path / ".env"),
        config_map=str(tmp_path / "configmap.yaml"),
        configmap_template=str(tmp_path / "absent.tmpl"),
    )
    with pytest.raises(FileNotFoundError):
        generate_schema(AppConfig, paths)
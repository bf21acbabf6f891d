# gotemplate-server

Building blocks for a small HTTP/GraphQL service: configuration handling,
readiness checks, route registration with a matching OpenAPI document, a
per-request transaction middleware, GraphQL client models and helpers that
generate a JSON schema, YAML defaults, an `.env` file and a config-map from a
configuration dataclass.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `gotemplate_server.envparse` – walks a configuration dataclass instance and
  lists every tagged leaf setting as a `VarInfo` (field name, dotted path,
  upper-case environment key, type and tags). Tags are taken from
  `dataclasses.field(metadata=...)`: the `koanf` entry names the variable,
  `json` names nested sections and `embedded` folds a nested dataclass into
  its parent. `EnvParseConfig.gather_env_info(prefix, spec)` raises
  `InvalidSpecificationError` when `spec` is not a dataclass instance.
- `gotemplate_server.schemagen` – `render_env` produces `KEY="default"` lines,
  `render_configmap` produces config-map entries with `{{ .Values... }}`
  references, `json_schema` builds a JSON schema (nested types under
  `$defs`), `yaml_defaults` dumps an instance as YAML with zero values filled
  from their `default` tag, and `generate_schema` writes all four files to the
  locations in a `SchemaPaths`.
- `gotemplate_server.models` – GraphQL client models (`Todo`, `PageInfo`,
  `CreateTodoInput`, `UpdateTodoInput`, `TodoWhereInput` and the create,
  update and delete payloads), each with `to_dict()` that leaves out empty
  optional fields; `OrderDirection` with `marshal_gql()` and
  `order_direction_from_gql()`.
- `gotemplate_server.readiness` – `Checks`, a named set of readiness checks
  whose `ready()` returns `(200, {"status": {...}})` when all pass or
  `(503, {...})` with the failure messages otherwise; `Handler`, the settings
  shared by the REST handlers, and `OauthProviderConfig`.
- `gotemplate_server.httpconfig` – `ServerConfig` with `Settings`,
  `ServerSettings` and `TLSSettings`; `default_tls_context()` (TLS 1.2 or
  later, ECDHE AES-128-GCM ciphers); the `ConfigProvider` protocol; and
  `ConfigProviderWithRefresh`, which reloads the configuration from another
  provider in a background thread when `settings.refresh_interval` is set and
  stops on `close()` or on leaving a `with` block.
- `gotemplate_server.transaction` – `TransactionMiddleware` wraps a handler so
  each request runs inside `db_client.tx()`, committing on success and rolling
  back when the handler raises; `current_transaction()` and
  `transaction_context()` expose the active transaction.
- `gotemplate_server.openapi` – `new_openapi_spec()` returns the base
  OpenAPI 3.1.0 document with shared error responses; `add_operation()`
  records an operation in it; `OAuth2`, `OpenID`, `APIKey` and `Basic` return
  security scheme objects; `CertFileMissingError` and `KeyFileMissingError`.
- `gotemplate_server.routes` – `Router` keeps routes and the OpenAPI document
  in step (`add_route`, `add_v1_route`, `add_unversioned_route`,
  `add_echo_only_route`, `version_one`, `version_two`, `base`, `dispatch`);
  registering the same method and path twice raises `RouteExistsError`.
  `register_routes()` installs the shared middleware and adds `/ready`,
  `/livez` and `/metrics` (a plain-text count of dispatched requests per
  route).

## Example

```python
from gotemplate_server.openapi import new_openapi_spec
from gotemplate_server.readiness import Handler
from gotemplate_server.routes import Router, register_routes

handler = Handler()
handler.add_readiness_check("db_primary", lambda: None)

router = Router(oas=new_openapi_spec(), handler=handler)
register_routes(router)

status, body = router.dispatch("GET", "/livez")
# status == HTTPStatus.OK, body == {"status": "UP"}

status, body = router.dispatch("GET", "/ready")
# body == {"status": {"db_primary": "OK"}}
```

## What it does not do

- It does not listen on a socket or serve HTTP itself: `Router.dispatch`
  calls handlers in-process, and wiring it to a web server is left to you.
- It has no GraphQL executor or resolvers and no database client; the models
  describe data only, and `TransactionMiddleware` works with whatever client
  you pass it.
- It has no command-line program; `generate_schema` is called from Python.
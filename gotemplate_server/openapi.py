"""OpenAPI 3.1 specification scaffolding and security scheme helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

OPENAPI_VERSION = "3.1.0"
ERROR_RESPONSE_REF = "#/components/schemas/ErrorResponse"
HTTP_METHODS = frozenset({"connect", "delete", "get", "head", "options", "patch", "post", "put", "trace"})


class CertFileMissingError(FileNotFoundError):
    """HTTPS is enabled but no certificate file was provided."""

    def __init__(self, message: str = "no cert file found") -> None:
        super().__init__(message)


class KeyFileMissingError(FileNotFoundError):
    """HTTPS is enabled but no key file was provided."""

    def __init__(self, message: str = "no key file found") -> None:
        super().__init__(message)


def _error_response_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"error": {"type": "string"}},
    }


def _error_response(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "content": {"application/json": {"schema": {"$ref": ERROR_RESPONSE_REF}}},
    }


def new_openapi_spec() -> dict[str, Any]:
    """Return a fresh OpenAPI 3.1.0 document with the shared error responses."""
    schemas: dict[str, Any] = {"ErrorResponse": _error_response_schema()}
    responses = {
        "InternalServerError": _error_response("Internal Server Error"),
        "BadRequest": _error_response("Bad Request"),
        "Unauthorized": _error_response("Unauthorized"),
        "Conflict": _error_response("Conflict"),
    }

    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": "Datum OpenAPI 3.1.0 Specifications",
            "version": "v1.0.0",
            "contact": {"name": "Datum", "email": "support@example.com", "url": "https://example.com"},
            "license": {"name": "Apache 2.0"},
        },
        "paths": {},
        "servers": [
            {"description": "Datum API Server", "url": "https://api.example.com/v1"},
            {"description": "Datum API Server (local)", "url": "http://localhost:17608/v1"},
        ],
        "externalDocs": {
            "description": "Documentation for Datum's API services",
            "url": "https://docs.example.com",
        },
        "components": {
            "schemas": schemas,
            "responses": responses,
            "parameters": {},
            "requestBodies": {},
            "securitySchemes": {},
            "examples": {},
        },
        "tags": [
            {"name": "schema", "description": "Add or update schema definitions"},
            {"name": "graphql", "description": "GraphQL query endpoints"},
        ],
    }


def add_operation(spec: dict[str, Any], pattern: str, method: str, operation: dict[str, Any] | None) -> None:
    """Record ``operation`` for ``method`` on ``pattern`` in the spec's paths.

    The path item is created even when ``operation`` is ``None``.
    """
    method_key = method.lower()
    if method_key not in HTTP_METHODS:
        raise ValueError(f"unsupported HTTP method {method!r}")
    item = spec.setdefault("paths", {}).setdefault(pattern, {})
    if operation is not None:
        item[method_key] = operation


@dataclass
class OAuth2:
    """An OAuth2 authorization-code security scheme."""

    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] = field(default_factory=dict)

    def scheme(self) -> dict[str, Any]:
        """Return the security scheme object."""
        flow: dict[str, Any] = {
            "authorizationUrl": self.authorization_url,
            "tokenUrl": self.token_url,
            "scopes": dict(self.scopes),
        }
        if self.refresh_url:
            flow["refreshUrl"] = self.refresh_url
        return {"type": "oauth2", "flows": {"authorizationCode": flow}}


@dataclass
class OpenID:
    """An OpenID Connect security scheme."""

    connect_url: str = ""

    def scheme(self) -> dict[str, Any]:
        """Return the security scheme object."""
        return {"type": "openIdConnect", "openIdConnectUrl": self.connect_url}


@dataclass
class APIKey:
    """An API key passed in a request header."""

    name: str = ""

    def scheme(self) -> dict[str, Any]:
        """Return the security scheme object."""
        return {"type": "http", "in": "header", "name": self.name}


@dataclass
class Basic:
    """HTTP basic authentication."""

    username: str = ""
    password: str = field(default="", repr=False)

    def scheme(self) -> dict[str, Any]:
        """Return the security scheme object."""
        return {"type": "http", "scheme": "basic"}
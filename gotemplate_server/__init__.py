"""Server scaffolding: configuration, readiness checks, routing, OpenAPI and schema generation."""

__version__ = "0.1.0"
"""Readiness checks and the settings shared by the REST handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable

CheckFunc = Callable[[], None]
"""A readiness check: returns normally when healthy and raises when not."""

OK = "OK"


class Checks:
    """A named set of readiness checks."""

    def __init__(self) -> None:
        self._checks: dict[str, CheckFunc] = {}

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, name: object) -> bool:
        return name in self._checks

    def add(self, name: str, check: CheckFunc) -> None:
        """Register ``check`` under ``name``, replacing any check of that name."""
        self._checks[name] = check

    def ready(self) -> tuple[HTTPStatus, dict[str, Any]]:
        """Run every check and return the HTTP status with the response body.

        When all checks pass the body is ``{"status": {...}}`` with status 200;
        when any fails the bare status map is returned with status 503.
        """
        failed = False
        status: dict[str, str] = {}

        for name, check in self._checks.items():
            try:
                check()
            except Exception as exc:  # noqa: BLE001 - any failure marks the check as down
                failed = True
                status[name] = str(exc)
            else:
                status[name] = OK

        if failed:
            return HTTPStatus.SERVICE_UNAVAILABLE, status
        return HTTPStatus.OK, {"status": status}


@dataclass
class OauthProviderConfig:
    """Settings for the supported OAuth providers."""

    redirect_url: str = field(
        default="http://localhost:3001/api/auth/callback/datum",
        metadata={
            "json": "redirectUrl",
            "koanf": "redirectUrl",
            "default": "http://localhost:3001/api/auth/callback/datum",
        },
    )
    github: dict[str, Any] = field(default_factory=dict, metadata={"json": "github", "koanf": "github"})
    google: dict[str, Any] = field(default_factory=dict, metadata={"json": "google", "koanf": "google"})
    webauthn: dict[str, Any] = field(default_factory=dict, metadata={"json": "webauthn", "koanf": "webauthn"})


@dataclass
class Handler:
    """Dependencies and settings available to the REST handlers."""

    is_test: bool = False
    db_client: Any = None
    redis_client: Any = None
    logger: logging.Logger | None = None
    ready_checks: Checks = field(default_factory=Checks)
    session_config: Any = None
    auth_middleware: list[Callable[..., Any]] = field(default_factory=list)
    jwt_keys: Any = None
    oauth_provider: OauthProviderConfig = field(default_factory=OauthProviderConfig)

    def add_readiness_check(self, name: str, check: CheckFunc) -> None:
        """Add a check run on calls to the readiness endpoint."""
        self.ready_checks.add(name, check)
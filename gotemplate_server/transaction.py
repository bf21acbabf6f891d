"""Per-request database transaction middleware."""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Iterator

ROLLBACK_ERR = "error rolling back transaction"
TRANSACTION_START_ERR = "error starting transaction"
TRANSACTION_COMMIT_ERR = "error committing transaction"

_current_tx: contextvars.ContextVar[Any] = contextvars.ContextVar("current_transaction", default=None)

RequestHandler = Callable[[Any], Any]


class ProcessingRequestError(Exception):
    """The request could not be processed."""

    def __init__(self, message: str = "error processing request, please try again") -> None:
        super().__init__(message)


def current_transaction() -> Any:
    """Return the transaction bound to the current context, or ``None``."""
    return _current_tx.get()


@contextmanager
def transaction_context(tx: Any) -> Iterator[Any]:
    """Bind ``tx`` as the current transaction for the duration of the block."""
    token = _current_tx.set(tx)
    try:
        yield tx
    finally:
        _current_tx.reset(token)


def _error_response() -> tuple[HTTPStatus, dict[str, str]]:
    return HTTPStatus.INTERNAL_SERVER_ERROR, {"error": str(ProcessingRequestError())}


@dataclass
class TransactionMiddleware:
    """Wraps handlers so each request runs in its own database transaction.

    ``db_client.tx()`` must return an object with ``commit()`` and ``rollback()``.
    """

    db_client: Any
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def middleware(self, next_handler: RequestHandler) -> RequestHandler:
        """Return ``next_handler`` wrapped in begin/commit/rollback handling."""

        def handle(request: Any) -> Any:
            try:
                tx = self.db_client.tx()
            except Exception as exc:  # noqa: BLE001
                self.logger.error("%s: %s", TRANSACTION_START_ERR, exc)
                return _error_response()

            with transaction_context(tx):
                try:
                    response = next_handler(request)
                except Exception:
                    self.logger.debug("rolling back transaction in middleware")
                    try:
                        tx.rollback()
                    except Exception as rollback_exc:  # noqa: BLE001
                        self.logger.error("%s: %s", ROLLBACK_ERR, rollback_exc)
                        return _error_response()
                    raise

            self.logger.debug("committing transaction in middleware")
            try:
                tx.commit()
            except Exception as exc:  # noqa: BLE001
                self.logger.error("%s: %s", TRANSACTION_COMMIT_ERR, exc)
                return _error_response()

            return response

        return handle
"""Structured logging for documentation requests and introspection runs."""
from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import monotonic
from typing import Dict, Iterator, Optional

_CURRENT_REQUEST: contextvars.ContextVar["RequestContext | None"] = contextvars.ContextVar(
    "apidoc_request", default=None
)


def configure_root(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


@contextmanager
def scoped_timer(
    logger: logging.Logger, message: str, *, extra: Optional[Dict[str, object]] = None
) -> Iterator[None]:
    start = monotonic()
    try:
        yield
    finally:
        logger.debug("%s", message, extra={"duration_s": monotonic() - start, **(extra or {})})


@dataclass(slots=True)
class RequestContext:
    """Correlation id and counters of one documentation request."""

    name: str
    logger: logging.Logger
    fields: Dict[str, object] = field(default_factory=dict)
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    counters: Dict[str, int] = field(default_factory=dict)

    def extra(self, **values: object) -> Dict[str, object]:
        return {"request_id": self.request_id, "request": self.name, **self.fields, **values}

    def log(self, level: int, message: str, **values: object) -> None:
        self.logger.log(level, message, extra=self.extra(**values))


@contextmanager
def request_scope(
    name: str, *, logger: Optional[logging.Logger] = None, **fields: object
) -> Iterator[RequestContext]:
    """Log start and finish of one request; *fields* ride along on every record."""

    context = RequestContext(
        name=name, logger=logger or logging.getLogger("apidoc.request"), fields=fields
    )
    token = _CURRENT_REQUEST.set(context)
    start = monotonic()
    context.log(logging.INFO, "request.start")
    try:
        yield context
    except Exception:
        context.logger.exception("request.error", extra=context.extra())
        raise
    finally:
        context.log(
            logging.INFO,
            "request.finish",
            duration_s=monotonic() - start,
            counters=dict(context.counters),
        )
        _CURRENT_REQUEST.reset(token)


def current_request() -> Optional[RequestContext]:
    return _CURRENT_REQUEST.get()


def increment_counter(name: str, amount: int = 1) -> None:
    """Bump *name* on the active request; a no-op outside one."""

    context = current_request()
    if context is not None:
        context.counters[name] = context.counters.get(name, 0) + amount


__all__ = [
    "RequestContext",
    "configure_root",
    "current_request",
    "increment_counter",
    "request_scope",
    "scoped_timer",
]

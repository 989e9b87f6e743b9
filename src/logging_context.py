"""Booking-id correlation for allocation logs.

One allocation attempt spans several awaits across resolver, ranker,
checker and committer; the booking being allocated is kept in a
``ContextVar`` so each concurrent attempt tags its own log lines.

The filter is installed on the root handlers by ``install_booking_id_filter``
(called from ``load_config``), so every record that reaches a handler,
including third-party ones, has ``booking_id`` set before ``LOG_FORMAT``
is applied. Records logged outside an allocation show ``NO_BOOKING``.
"""

import logging
from contextvars import ContextVar
from typing import Iterable, Optional

NO_BOOKING = "NO_BOOKING"

LOG_FORMAT = "%(asctime)s [%(name)s] [%(booking_id)s] %(levelname)s: %(message)s"

_booking_id: ContextVar[str] = ContextVar("booking_id", default=NO_BOOKING)


def set_booking_id(booking_id: str) -> None:
    """Tag log records in the current async context with ``booking_id``."""
    _booking_id.set(booking_id)


def get_booking_id() -> str:
    return _booking_id.get()


class BookingIdFilter(logging.Filter):
    """Copies the current booking id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "booking_id"):
            record.booking_id = _booking_id.get()  # type: ignore[attr-defined]
        return True


def _attach(target: logging.Filterer) -> None:
    if not any(isinstance(f, BookingIdFilter) for f in target.filters):
        target.addFilter(BookingIdFilter())


def install_booking_id_filter(handlers: Optional[Iterable[logging.Handler]] = None) -> None:
    """Attach BookingIdFilter to ``handlers`` (default: the root logger's handlers)."""
    for handler in handlers if handlers is not None else logging.getLogger().handlers:
        _attach(handler)


def get_booking_logger(name: str) -> logging.Logger:
    """Return a module logger whose records carry ``booking_id``.

    Handlers that were not set up through ``install_booking_id_filter``
    still see the attribute.
    """
    logger = logging.getLogger(name)
    _attach(logger)
    return logger

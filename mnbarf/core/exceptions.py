"""Exception hierarchy for the MNB SOAP client.

Everything raised on purpose by this package inherits from MnbError, so
callers can catch one base class and still tell transport problems
(retried) from decode problems (not retried) and cancellation.
"""

from __future__ import annotations


class MnbError(Exception):
    """Base error for the MNB client."""

    operation: str | None = None


class ParseError(MnbError, ValueError):
    """A wire literal could not be parsed into a typed value."""

    def __init__(self, kind: str, literal: str) -> None:
        self.kind = kind
        self.literal = literal
        super().__init__(f"Невозможно разобрать {kind}: {literal!r}")


class ConfigError(ParseError):
    """Invalid value supplied by the caller (e.g. a date range bound)."""


class TransportError(MnbError):
    """Network failure, HTTP error status or payload extraction failure."""

    def __init__(self, reason: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(reason)


class PayloadNotFound(TransportError):
    """The SOAP body ended before any character data was found."""


class DecodeError(MnbError):
    """The extracted payload is not the XML document we expected."""

    def __init__(self, reason: str, payload: bytes) -> None:
        self.reason = reason
        self.payload = payload
        super().__init__(f"Ошибка разбора ответа: {reason}")


class CancellationError(MnbError):
    """The caller cancelled the call."""

    def __init__(self, last_error: BaseException | None = None) -> None:
        self.last_error = last_error
        msg = "Операция отменена"
        if last_error is not None:
            msg += f" (последняя ошибка: {last_error})"
        super().__init__(msg)

from __future__ import annotations

from typing import Any, Iterator
from xml.sax.saxutils import escape

import pytest

from mnbarf.soap_service.config import RetryPolicy
from mnbarf.soap_service.transport import Attempt, SoapTransport

SOAP11 = "http://schemas.xmlsoap.org/soap/envelope/"

CURRENT_RATES_PAYLOAD = (
    '<MNBCurrentExchangeRates><Day date="2020-08-14">'
    '<Rate unit="1" curr="USD">293,01</Rate>'
    "</Day></MNBCurrentExchangeRates>"
)


def soap_envelope(operation: str, payload: str, cdata: bool = False) -> bytes:
    """Wrap a payload the way the MNB service does."""
    inner = f"<![CDATA[{payload}]]>" if cdata else escape(payload)
    return (
        f'<s:Envelope xmlns:s="{SOAP11}"><s:Body>'
        f'<{operation}Response xmlns="http://www.mnb.hu/webservices/"'
        ' xmlns:i="http://www.w3.org/2001/XMLSchema-instance">'
        f"<{operation}Result>{inner}</{operation}Result>"
        f"</{operation}Response></s:Body></s:Envelope>"
    ).encode("utf-8")


class FakeResponse:
    def __init__(
        self, body: bytes = b"", status_code: int = 200, reason: str = "OK", chunk: int = 64
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.reason = reason
        self.chunk = chunk
        self.closed = False

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for i in range(0, len(self.body), self.chunk):
            yield self.body[i : i + self.chunk]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class FakeSession:
    """Replays outcomes in order; the last one repeats forever.

    An outcome is a FakeResponse or an exception instance to raise.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def make_envelope():
    return soap_envelope


@pytest.fixture
def current_rates_envelope() -> bytes:
    return soap_envelope("GetCurrentExchangeRates", CURRENT_RATES_PAYLOAD)


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def ok_response():
    return FakeResponse


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(delay=0.001, factor=2, max_delay=0.01, max_duration=5.0)


@pytest.fixture
def attempts() -> list[Attempt]:
    return []


@pytest.fixture
def make_transport(fast_retry: RetryPolicy, attempts: list[Attempt]):
    def factory(session: FakeSession, retry: RetryPolicy | None = None) -> SoapTransport:
        return SoapTransport(
            session=session,  # type: ignore[arg-type]
            retry=retry or fast_retry,
            observer=attempts.append,
            timeout=1.0,
        )

    return factory

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator
from xml.parsers import expat

import requests

from ..core.cancel import CancelToken
from ..core.exceptions import CancellationError, MnbError, TransportError
from .config import RetryPolicy
from .envelope import with_header
from .scanner import find_payload

CHUNK_SIZE = 8192


@dataclass(frozen=True)
class Attempt:
    """One HTTP exchange, as reported to the observer."""

    number: int
    url: str
    action: str
    request: str
    status: str | None
    response: str
    payload: str | None
    duration: float
    error: BaseException | None = None


Observer = Callable[[Attempt], None]


def logging_observer(logger: logging.Logger | None = None) -> Observer:
    """Observer writing every attempt to the `mnbarf.soap` logger."""
    log = logger or logging.getLogger("mnbarf.soap")

    def observe(a: Attempt) -> None:
        ms = int(a.duration * 1000)
        if a.error is None:
            log.debug(
                "attempt=%d url=%s action=%s status=%s ms=%d request=%r payload=%r",
                a.number, a.url, a.action, a.status, ms, a.request, a.payload,
            )
        else:
            log.warning(
                "attempt=%d url=%s action=%s status=%s ms=%d error=%s response=%r",
                a.number, a.url, a.action, a.status, ms, a.error, a.response,
            )

    return observe


class SoapTransport:
    """Posts SOAP envelopes and extracts the payload from the response body.

    Failed attempts (network errors, HTTP >= 400, unreadable envelopes) are
    retried following the RetryPolicy; the first error is raised once the
    budget is spent. The session is the only state shared between calls.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        retry: RetryPolicy | None = None,
        observer: Observer | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.retry = retry or RetryPolicy()
        self.observer = observer
        self.timeout = timeout

    def call(
        self, url: str, action: str, body: str, cancel: CancelToken | None = None
    ) -> bytes:
        """POST `body` as the `action` SOAP call and return the raw payload.

        `cancel` is checked before each attempt, between response chunks
        and during backoff. requests cannot interrupt a blocked connect or
        header read, so a cancel issued then lands only after at most
        `timeout` seconds.

        Raises:
            TransportError: the first failure, once retries are exhausted
            CancellationError: when `cancel` fires before success
        """
        request = with_header(body)
        cancel = cancel or CancelToken()
        first_error: TransportError | None = None
        started = time.monotonic()
        attempt = 0
        while True:
            if cancel.cancelled:
                raise CancellationError(first_error) from first_error
            attempt += 1
            try:
                return self._attempt(attempt, url, action, request, cancel)
            except CancellationError:
                raise CancellationError(first_error) from first_error
            except TransportError as exc:
                if first_error is None:
                    first_error = exc
            if not self.retry.should_retry(attempt, time.monotonic() - started):
                raise first_error
            if cancel.wait(self.retry.next_delay(attempt)):
                raise CancellationError(first_error) from first_error

    def _attempt(
        self, number: int, url: str, action: str, request: str, cancel: CancelToken
    ) -> bytes:
        t0 = time.perf_counter()
        status: str | None = None
        payload: str | None = None
        error: MnbError | None = None
        buf = bytearray()
        try:
            try:
                resp = self.session.post(
                    url,
                    data=request.encode("utf-8"),
                    headers={
                        "SOAPAction": action,
                        "Content-Type": "text/xml; charset=utf-8",
                    },
                    timeout=self.timeout,
                    stream=True,
                )
            except requests.exceptions.RequestException as exc:
                raise TransportError(f"Network error (POST {url}): {exc}") from exc

            with resp:
                status = f"{resp.status_code} {resp.reason}"
                if resp.status_code >= 400:
                    raise TransportError(
                        f"POST {url!r}: {status}", status=resp.status_code
                    )
                try:
                    payload = find_payload(self._stream(resp, buf, cancel))
                except expat.ExpatError as exc:
                    raise TransportError(f"Malformed SOAP response: {exc}") from exc
                except requests.exceptions.RequestException as exc:
                    raise TransportError(f"Network error (POST {url}): {exc}") from exc
        except MnbError as exc:
            error = exc
            raise
        finally:
            if self.observer is not None:
                self.observer(
                    Attempt(
                        number=number,
                        url=url,
                        action=action,
                        request=request,
                        status=status,
                        response=buf.decode("utf-8", errors="replace"),
                        payload=payload,
                        duration=time.perf_counter() - t0,
                        error=error,
                    )
                )
        return payload.encode("utf-8")

    @staticmethod
    def _stream(
        resp: requests.Response, buf: bytearray, cancel: CancelToken
    ) -> Iterator[bytes]:
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            if cancel.cancelled:
                raise CancellationError()
            buf.extend(chunk)
            yield chunk

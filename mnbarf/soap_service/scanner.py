"""Streaming XML token scanner for SOAP responses.

MNB answers with the real result as an escaped XML document (or CDATA)
inside <soap:Body><XResponse><XResult>. The name of the wrapper elements
differs per operation, so instead of mapping them we walk the token
stream: find the SOAP Body, then take the first character data.
"""

from __future__ import annotations

from collections import deque
from typing import Final, Iterable, Iterator, NamedTuple, Union
from xml.parsers import expat

from ..core.exceptions import PayloadNotFound

SOAP_NAMESPACES: Final[frozenset[str]] = frozenset(
    {
        "",
        "http://schemas.xmlsoap.org/soap/envelope/",
        "http://www.w3.org/2003/05/soap-envelope",
        "http://www.w3.org/2003/05/soap-envelope/",
    }
)


class StartElement(NamedTuple):
    space: str
    local: str


class EndElement(NamedTuple):
    space: str
    local: str


class CharData(NamedTuple):
    text: str


Token = Union[StartElement, EndElement, CharData]


def _split(name: str) -> tuple[str, str]:
    space, sep, local = name.rpartition(" ")
    return (space, local) if sep else ("", name)


def iter_tokens(chunks: Iterable[bytes]) -> Iterator[Token]:
    """Tokenize an XML byte stream incrementally.

    Adjacent text (entity references, CDATA sections, chunk boundaries) is
    coalesced into a single CharData token.

    Raises:
        xml.parsers.expat.ExpatError: on malformed XML
    """
    parser = expat.ParserCreate(namespace_separator=" ")
    ready: deque[Token] = deque()
    text: list[str] = []

    def flush() -> None:
        if text:
            ready.append(CharData("".join(text)))
            text.clear()

    def on_start(name: str, _attrs: dict[str, str]) -> None:
        flush()
        ready.append(StartElement(*_split(name)))

    def on_end(name: str) -> None:
        flush()
        ready.append(EndElement(*_split(name)))

    parser.StartElementHandler = on_start
    parser.EndElementHandler = on_end
    parser.CharacterDataHandler = text.append

    for chunk in chunks:
        if chunk:
            parser.Parse(chunk, False)
        while ready:
            yield ready.popleft()
    parser.Parse(b"", True)
    flush()
    while ready:
        yield ready.popleft()


def find_soap_body(tokens: Iterator[Token]) -> StartElement:
    """Advance `tokens` past the SOAP Body start element and return it."""
    for tok in tokens:
        if (
            isinstance(tok, StartElement)
            and tok.local.lower() == "body"
            and tok.space in SOAP_NAMESPACES
        ):
            return tok
    raise PayloadNotFound("SOAP Body not found")


def first_char_data(tokens: Iterator[Token]) -> str:
    """Return the first non-blank character data after a start element.

    Raises:
        PayloadNotFound: if an end element (or the stream end) comes first
    """
    seen_start = False
    for tok in tokens:
        if isinstance(tok, StartElement):
            seen_start = True
        elif isinstance(tok, CharData):
            if seen_start and tok.text.strip():
                return tok.text.strip()
        else:
            raise PayloadNotFound(f"no character data before </{tok.local}>")
    raise PayloadNotFound("unexpected end of SOAP response")


def find_payload(chunks: Iterable[bytes]) -> str:
    """Extract the payload text nested inside the SOAP body."""
    tokens = iter_tokens(chunks)
    find_soap_body(tokens)
    return first_char_data(tokens)

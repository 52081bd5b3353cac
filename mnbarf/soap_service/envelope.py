"""SOAP request envelopes for the MNB web services.

Each operation has a fixed template; only start/end dates and the
comma-joined currency list are substituted.
"""

from __future__ import annotations

from datetime import date
from typing import Final, Iterable
from xml.sax.saxutils import escape

from ..core.codec import format_date

XML_HEADER: Final[str] = '<?xml version="1.0" encoding="UTF-8"?>\n'

_ENVELOPE: Final[str] = (
    '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"'
    ' xmlns:web="http://www.mnb.hu/webservices/">\n'
    "   <soapenv:Header/>\n"
    "   <soapenv:Body>\n"
    "      {call}\n"
    "   </soapenv:Body>\n"
    "</soapenv:Envelope>"
)


def _call(operation: str, params: Iterable[tuple[str, str]] = ()) -> str:
    inner = "".join(f"<web:{k}>{escape(v)}</web:{k}>" for k, v in params)
    if not inner:
        return f"<web:{operation}/>"
    return f"<web:{operation}>{inner}</web:{operation}>"


def envelope(operation: str, params: Iterable[tuple[str, str]] = ()) -> str:
    """Envelope body (without XML declaration) for a parameterised call."""
    return _ENVELOPE.format(call=_call(operation, params))


def with_header(body: str) -> str:
    return XML_HEADER + body


def join_currencies(currencies: Iterable[str]) -> str:
    return ",".join(c.strip().upper() for c in currencies if c and c.strip())


def exchange_rates_body(start: date, end: date, currencies: Iterable[str]) -> str:
    return envelope(
        "GetExchangeRates",
        [
            ("startDate", format_date(start)),
            ("endDate", format_date(end)),
            ("currencyNames", join_currencies(currencies)),
        ],
    )


def currency_units_body(currencies: Iterable[str]) -> str:
    return envelope("GetCurrencyUnits", [("currencyNames", join_currencies(currencies))])


def base_rates_body(start: date, end: date) -> str:
    return envelope(
        "GetCentralBankBaseRate",
        [("startDate", format_date(start)), ("endDate", format_date(end))],
    )

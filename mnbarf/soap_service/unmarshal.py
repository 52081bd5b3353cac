"""Decoders for the XML payloads extracted from MNB SOAP responses.

Examples of payloads (after unescaping):

    <MNBCurrentExchangeRates><Day date="2020-08-14">
        <Rate unit="1" curr="USD">293,01</Rate>...</Day></MNBCurrentExchangeRates>
    <MNBCentralBankBaseRates>
        <BaseRate publicationDate="2020-07-21">0,60</BaseRate>...</MNBCentralBankBaseRates>
    <MNBExchangeRatesQueryValues><FirstDate>1949-01-03</FirstDate>
        <LastDate>2020-08-14</LastDate><Currencies><Curr>HUF</Curr>...
    <MNBStoredInterval><DateInterval startdate="1949-01-03" enddate="2020-08-14"/>
    <MNBCurrencyUnits><Units><Unit curr="HUF">1</Unit></Units></MNBCurrencyUnits>

Unknown elements are ignored. Anything malformed raises DecodeError with
the raw payload attached; decoding is never retried.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from contextlib import contextmanager
from typing import Iterator

from ..core.codec import parse_date, parse_decimal
from ..core.exceptions import DecodeError, ParseError
from ..core.models import (
    BaseRate,
    CurrencyUnit,
    DateInterval,
    DayRates,
    DomainError,
    Rate,
    ServiceInfo,
)


def _local(tag: str) -> str:
    return tag.rpartition("}")[2]


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in elem if _local(c.tag) == name]


def _child(elem: ET.Element, name: str) -> ET.Element:
    for c in elem:
        if _local(c.tag) == name:
            return c
    raise DecodeError(f"missing <{name}> in <{_local(elem.tag)}>", b"")


def _attr(elem: ET.Element, name: str) -> str:
    value = elem.get(name)
    if value is None:
        raise DecodeError(f"missing {name!r} attribute on <{_local(elem.tag)}>", b"")
    return value


@contextmanager
def _decoding(payload: bytes) -> Iterator[ET.Element]:
    """Parse the payload and turn every failure inside into DecodeError."""
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise DecodeError(str(exc), payload) from exc
    try:
        yield root
    except DecodeError as exc:
        # helpers raise without the payload at hand
        raise DecodeError(exc.reason, payload) from exc
    except (ParseError, DomainError) as exc:
        raise DecodeError(str(exc), payload) from exc


def _rate(elem: ET.Element) -> Rate:
    unit = elem.get("unit")
    try:
        unit_value = int(unit) if unit else 1
    except ValueError as exc:
        raise DecodeError(f"bad unit {unit!r}", b"") from exc
    return Rate(
        currency=_attr(elem, "curr").strip().upper(),
        unit=unit_value,
        rate=parse_decimal(elem.text or ""),
    )


def _day(elem: ET.Element) -> DayRates:
    return DayRates(
        day=parse_date(_attr(elem, "date")),
        rates=[_rate(r) for r in _children(elem, "Rate")],
    )


def _base_rate(elem: ET.Element) -> BaseRate:
    return BaseRate(
        publication=parse_date(_attr(elem, "publicationDate")),
        rate=parse_decimal(elem.text or ""),
    )


def _currency_codes(root: ET.Element) -> list[str]:
    return [
        (c.text or "").strip()
        for c in _children(_child(root, "Currencies"), "Curr")
        if (c.text or "").strip()
    ]


def decode_currencies(payload: bytes) -> list[str]:
    """Currency codes from either a GetCurrencies or a GetInfo payload."""
    with _decoding(payload) as root:
        return _currency_codes(root)


def decode_day_rates(payload: bytes) -> DayRates:
    with _decoding(payload) as root:
        return _day(_child(root, "Day"))


def decode_exchange_rates(payload: bytes) -> list[DayRates]:
    with _decoding(payload) as root:
        return [_day(d) for d in _children(root, "Day")]


def decode_base_rate(payload: bytes) -> BaseRate:
    with _decoding(payload) as root:
        return _base_rate(_child(root, "BaseRate"))


def decode_base_rates(payload: bytes) -> list[BaseRate]:
    with _decoding(payload) as root:
        return [_base_rate(b) for b in _children(root, "BaseRate")]


def decode_info(payload: bytes) -> ServiceInfo:
    with _decoding(payload) as root:
        currencies = _currency_codes(root) if _children(root, "Currencies") else []
        return ServiceInfo(
            first_date=parse_date(_child(root, "FirstDate").text or ""),
            last_date=parse_date(_child(root, "LastDate").text or ""),
            currencies=currencies,
        )


def decode_date_interval(payload: bytes) -> DateInterval:
    with _decoding(payload) as root:
        interval = _child(root, "DateInterval")
        return DateInterval(
            start=parse_date(_attr(interval, "startdate")),
            end=parse_date(_attr(interval, "enddate")),
        )


def decode_currency_units(payload: bytes) -> list[CurrencyUnit]:
    with _decoding(payload) as root:
        return [
            CurrencyUnit(
                currency=_attr(u, "curr").strip().upper(),
                unit=parse_decimal(u.text or ""),
            )
            for u in _children(_child(root, "Units"), "Unit")
        ]

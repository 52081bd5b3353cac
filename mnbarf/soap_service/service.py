from __future__ import annotations

from abc import ABC
from datetime import date, datetime
from typing import Callable, TypeVar

import requests

from ..core.cancel import CancelToken
from ..core.codec import coerce_date
from ..core.models import BaseRate, CurrencyUnit, DateInterval, DayRates, ServiceInfo
from ..decorators import log_operation
from ..logging_config import configure_logging
from . import envelope, unmarshal
from .config import (
    ALAPKAMAT_ACTION_PREFIX,
    ARFOLYAM_ACTION_PREFIX,
    SoapConfig,
    load_soap_config,
)
from .transport import Observer, SoapTransport, logging_observer

T = TypeVar("T")
DateLike = date | datetime | str


class BaseSoapClient(ABC):
    """Binds a transport to one MNB endpoint and its SOAPAction prefix."""

    ACTION_PREFIX: str

    def __init__(self, url: str, transport: SoapTransport) -> None:
        self.url = url
        self.transport = transport

    def _invoke(
        self,
        operation: str,
        body: str,
        decode: Callable[[bytes], T],
        cancel: CancelToken | None,
    ) -> T:
        payload = self.transport.call(
            self.url, self.ACTION_PREFIX + operation, body, cancel
        )
        return decode(payload)


class ExchangeRateService(BaseSoapClient):
    """MNBArfolyamServiceSoap: daily exchange rates (arfolyamok.asmx)."""

    ACTION_PREFIX = ARFOLYAM_ACTION_PREFIX

    def __init__(
        self, url: str, transport: SoapTransport, currencies_via_info: bool = False
    ) -> None:
        super().__init__(url, transport)
        self.currencies_via_info = currencies_via_info

    def get_currencies(self, cancel: CancelToken | None = None) -> list[str]:
        """Return every currency code the service knows, historical ones included.

        Servers without a dedicated GetCurrencies call are queried through
        GetInfo instead (see SoapConfig.CURRENCIES_VIA_INFO).
        """
        if self.currencies_via_info:
            return self._currencies_via_info(cancel)
        return self._currencies(cancel)

    @log_operation("GetCurrencies")
    def _currencies(self, cancel: CancelToken | None) -> list[str]:
        return self._invoke(
            "GetCurrencies",
            envelope.envelope("GetCurrencies"),
            unmarshal.decode_currencies,
            cancel,
        )

    @log_operation("GetCurrencies (via GetInfo)")
    def _currencies_via_info(self, cancel: CancelToken | None) -> list[str]:
        return self._invoke(
            "GetInfo", envelope.envelope("GetInfo"), unmarshal.decode_currencies, cancel
        )

    @log_operation("GetCurrentExchangeRates")
    def get_current_exchange_rates(self, cancel: CancelToken | None = None) -> DayRates:
        return self._invoke(
            "GetCurrentExchangeRates",
            envelope.envelope("GetCurrentExchangeRates"),
            unmarshal.decode_day_rates,
            cancel,
        )

    @log_operation("GetExchangeRates")
    def get_exchange_rates(
        self,
        start: DateLike,
        end: DateLike,
        *currencies: str,
        cancel: CancelToken | None = None,
    ) -> list[DayRates]:
        """Daily rates between `start` and `end` (inclusive) for `currencies`.

        Days come in wire order, which is usually newest first.

        Raises:
            ConfigError: if a bound is a malformed date string
        """
        body = envelope.exchange_rates_body(
            coerce_date(start), coerce_date(end), currencies
        )
        return self._invoke(
            "GetExchangeRates", body, unmarshal.decode_exchange_rates, cancel
        )

    @log_operation("GetInfo")
    def get_info(self, cancel: CancelToken | None = None) -> ServiceInfo:
        return self._invoke(
            "GetInfo", envelope.envelope("GetInfo"), unmarshal.decode_info, cancel
        )

    @log_operation("GetDateInterval")
    def get_date_interval(self, cancel: CancelToken | None = None) -> DateInterval:
        return self._invoke(
            "GetDateInterval",
            envelope.envelope("GetDateInterval"),
            unmarshal.decode_date_interval,
            cancel,
        )

    @log_operation("GetCurrencyUnits")
    def get_currency_units(
        self, *currencies: str, cancel: CancelToken | None = None
    ) -> list[CurrencyUnit]:
        return self._invoke(
            "GetCurrencyUnits",
            envelope.currency_units_body(currencies),
            unmarshal.decode_currency_units,
            cancel,
        )


class BaseRateService(BaseSoapClient):
    """MNBAlapkamatServiceSoap: central bank base rate (alapkamat.asmx)."""

    ACTION_PREFIX = ALAPKAMAT_ACTION_PREFIX

    @log_operation("GetCurrentCentralBankBaseRate")
    def get_current_base_rate(self, cancel: CancelToken | None = None) -> BaseRate:
        return self._invoke(
            "GetCurrentCentralBankBaseRate",
            envelope.envelope("GetCurrentCentralBankBaseRate"),
            unmarshal.decode_base_rate,
            cancel,
        )

    @log_operation("GetCentralBankBaseRate")
    def get_base_rates(
        self, start: DateLike, end: DateLike, cancel: CancelToken | None = None
    ) -> list[BaseRate]:
        body = envelope.base_rates_body(coerce_date(start), coerce_date(end))
        return self._invoke(
            "GetCentralBankBaseRate", body, unmarshal.decode_base_rates, cancel
        )


_DEFAULT_OBSERVER = object()


def build_services(
    cfg: SoapConfig | None = None,
    session: requests.Session | None = None,
    observer: Observer | None | object = _DEFAULT_OBSERVER,
    configure_logs: bool = False,
) -> tuple[ExchangeRateService, BaseRateService]:
    """Build both services sharing one transport.

    The observer defaults to logging every attempt; pass None to disable.
    configure_logs=True also runs configure_logging() for callers that
    have no logging setup of their own.
    """
    if configure_logs:
        configure_logging()
    cfg = cfg or load_soap_config()
    if observer is _DEFAULT_OBSERVER:
        observer = logging_observer()
    transport = SoapTransport(
        session=session,
        retry=cfg.RETRY,
        observer=observer,  # type: ignore[arg-type]
        timeout=cfg.REQUEST_TIMEOUT,
    )
    return (
        ExchangeRateService(cfg.ARFOLYAM_URL, transport, cfg.CURRENCIES_VIA_INFO),
        BaseRateService(cfg.ALAPKAMAT_URL, transport),
    )

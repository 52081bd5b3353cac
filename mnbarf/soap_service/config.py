from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from dotenv import find_dotenv, load_dotenv

from ..core.exceptions import ConfigError
from ..infra.settings import SettingsLoader

WEBSERVICES_NS: Final[str] = "http://www.mnb.hu/webservices/"
ARFOLYAM_ACTION_PREFIX: Final[str] = WEBSERVICES_NS + "MNBArfolyamServiceSoap/"
ALAPKAMAT_ACTION_PREFIX: Final[str] = WEBSERVICES_NS + "MNBAlapkamatServiceSoap/"

_TRUE = {"1", "true", "True", "yes"}


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff schedule.

    next_delay() is a pure function of the attempt number; the overall
    deadline and attempt budget are checked explicitly by the caller via
    should_retry().
    """

    delay: float = 0.1
    factor: float = 2.0
    max_delay: float = 5.0
    max_duration: float = 30.0
    max_attempts: int | None = None

    def next_delay(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        if attempt < 1:
            return 0.0
        return min(self.max_delay, self.delay * self.factor ** (attempt - 1))

    def should_retry(self, attempt: int, elapsed: float) -> bool:
        """True if another attempt fits into the budget after `attempt` failures."""
        if self.max_attempts is not None and attempt >= self.max_attempts:
            return False
        return elapsed + self.next_delay(attempt) < self.max_duration


@dataclass(frozen=True)
class SoapConfig:
    # Эндпоинты
    ARFOLYAM_URL: str
    ALAPKAMAT_URL: str

    # Сетевые параметры
    REQUEST_TIMEOUT: float
    RETRY: RetryPolicy = field(default_factory=RetryPolicy)

    # GetCurrencies via GetInfo for servers without the dedicated call
    CURRENCIES_VIA_INFO: bool = False


def _env_number(name: str, default: object, kind: type = float):
    raw = os.getenv(name)
    value = default if raw in (None, "") else raw
    if value is None:
        return None
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(name, str(value)) from exc


def load_soap_config() -> SoapConfig:
    """Load SOAP client configuration from env/.env and project settings.

    Environment variables override .env; SettingsLoader provides the
    defaults for endpoints, timeouts and the retry schedule.
    """
    # Load .env once per process (non-overriding), if present
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(dotenv_path=path, override=False)
    settings = SettingsLoader()

    retry = RetryPolicy(
        delay=_env_number("MNB_RETRY_DELAY", settings.get("retry_delay", 0.1)),
        factor=_env_number("MNB_RETRY_FACTOR", settings.get("retry_factor", 2.0)),
        max_delay=_env_number("MNB_RETRY_MAX_DELAY", settings.get("retry_max_delay", 5.0)),
        max_duration=_env_number(
            "MNB_RETRY_MAX_DURATION", settings.get("retry_max_duration", 30.0)
        ),
        max_attempts=_env_number(
            "MNB_RETRY_MAX_ATTEMPTS", settings.get("retry_max_attempts"), int
        ),
    )
    via_info = os.getenv("MNB_CURRENCIES_VIA_INFO")
    return SoapConfig(
        ARFOLYAM_URL=os.getenv("MNB_ARFOLYAM_URL", settings.get("arfolyam_url")),
        ALAPKAMAT_URL=os.getenv("MNB_ALAPKAMAT_URL", settings.get("alapkamat_url")),
        REQUEST_TIMEOUT=_env_number("MNB_HTTP_TIMEOUT", settings.get("request_timeout", 10)),
        RETRY=retry,
        CURRENCIES_VIA_INFO=(
            via_info.strip() in _TRUE
            if via_info is not None
            else bool(settings.get("currencies_via_info", False))
        ),
    )

"""SOAP Service package.

Клиент SOAP-сервисов MNB: курсы валют (arfolyamok.asmx) и базовая
ставка центробанка (alapkamat.asmx).

Публичная точка входа:
- service.build_services(): ExchangeRateService и BaseRateService
  с общим транспортом, настроенным из окружения/pyproject.toml
"""

from __future__ import annotations

__all__ = [
    "config",
    "envelope",
    "scanner",
    "service",
    "transport",
    "unmarshal",
]

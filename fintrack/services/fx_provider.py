"""External FX rate lookup over HTTP.

The provider answers ``GET <FX_API_URL>`` (formatted with ``currency`` and
``base``) with ``{"sellRate": <number>}``: base-currency units per one unit
of ``currency``.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Protocol

import httpx

from fintrack.config import settings
from fintrack.core.exceptions import RateUnavailableException

logger = logging.getLogger(__name__)


class RateProvider(Protocol):
    def get_rate(self, currency: str, base_currency: str) -> Decimal:
        """Return base units per one unit of currency or raise RateUnavailableException."""
        ...


class HttpRateProvider:
    """RateProvider backed by an HTTP endpoint."""

    def __init__(
        self,
        url_template: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.url_template = settings.FX_API_URL if url_template is None else url_template
        self.timeout = settings.FX_API_TIMEOUT if timeout is None else timeout
        self.client = client

    def get_rate(self, currency: str, base_currency: str) -> Decimal:
        if not self.url_template:
            raise RateUnavailableException(currency, base_currency, "no FX provider configured")

        url = self.url_template.format(currency=currency, base=base_currency)
        try:
            if self.client is not None:
                response = self.client.get(url, timeout=self.timeout)
            else:
                with httpx.Client() as client:
                    response = client.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("FX lookup %s->%s failed: %s", currency, base_currency, e)
            raise RateUnavailableException(currency, base_currency, str(e)) from e
        except ValueError as e:
            raise RateUnavailableException(currency, base_currency, "invalid JSON response") from e

        raw_rate = payload.get("sellRate") if isinstance(payload, dict) else None
        try:
            rate = Decimal(str(raw_rate))
        except (InvalidOperation, ValueError):
            rate = None
        if raw_rate is None or rate is None or not rate.is_finite() or rate <= 0:
            raise RateUnavailableException(currency, base_currency, "response has no usable sellRate")

        logger.info("FX rate %s->%s = %s", currency, base_currency, rate)
        return rate

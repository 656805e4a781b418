import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from fintrack.core.exceptions import RateUnavailableException, ValidationException
from fintrack.repositories.fx_rate_repository import FxRateRepository
from fintrack.services.fx_provider import RateProvider, HttpRateProvider

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CurrencyNormalizer:
    """
    Converts entered amounts into the tenant's base currency.

    Tenant-stored rates win over the external provider. Any failure to
    obtain a rate raises RateUnavailableException, which the caller must
    treat as fatal to the write it supports.
    """

    def __init__(self, db: Session, rate_provider: RateProvider | None = None):
        self.db = db
        self.fx_repo = FxRateRepository(db)
        self.rate_provider = rate_provider or HttpRateProvider()

    def normalize(
        self,
        tenant_id: int,
        amount: Decimal,
        currency: str,
        base_currency: str,
        as_of: date | None = None,
    ) -> Decimal:
        """
        Convert amount to base currency.

        Args:
            tenant_id: Tenant whose stored rates apply
            amount: Entered amount
            currency: ISO code of the entered amount
            base_currency: Tenant base currency
            as_of: Transaction date; stored rates dated after it are ignored

        Returns:
            Amount in base currency rounded to cents

        Raises:
            ValidationException: If currency code is missing
            RateUnavailableException: If no rate can be obtained
        """
        if not currency:
            raise ValidationException("Currency is required")
        currency = currency.upper()
        base_currency = base_currency.upper()
        amount = Decimal(amount)

        if currency == base_currency:
            return amount

        rate = self.get_rate(tenant_id, currency, base_currency, as_of or date.today())
        return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)

    def get_rate(self, tenant_id: int, currency: str, base_currency: str, as_of: date) -> Decimal:
        stored = self.fx_repo.get_latest(tenant_id, currency, as_of)
        if stored is not None:
            return Decimal(stored.rate)

        logger.info("No stored %s rate for tenant %s; querying provider", currency, tenant_id)
        rate = self.rate_provider.get_rate(currency, base_currency)
        if rate is None or rate <= 0:
            raise RateUnavailableException(currency, base_currency, "provider returned no rate")
        return rate

from datetime import date
from sqlalchemy.orm import Session
from fintrack.models.fx_rate import FxRate


class FxRateRepository:
    """Repository for tenant-maintained exchange rates"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest(self, tenant_id: int, code: str, as_of: date) -> FxRate | None:
        """
        Get the most recent rate for `code` dated on or before `as_of`.

        Returns None when the tenant keeps no applicable rate.
        """
        return (
            self.db.query(FxRate)
            .filter(
                FxRate.tenant_id == tenant_id,
                FxRate.code == code,
                FxRate.date <= as_of,
            )
            .order_by(FxRate.date.desc(), FxRate.id.desc())
            .first()
        )

    def get_by_tenant(self, tenant_id: int) -> list[FxRate]:
        return (
            self.db.query(FxRate)
            .filter(FxRate.tenant_id == tenant_id)
            .order_by(FxRate.code, FxRate.date.desc())
            .all()
        )

    def create(self, rate: FxRate) -> FxRate:
        self.db.add(rate)
        self.db.commit()
        self.db.refresh(rate)
        return rate

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fintrack.core.exceptions import (
    AuditWriteException,
    DuplicateReceiptException,
    FinanceTrackerException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from fintrack.models.posting import (
    Expense,
    Income,
    PaymentMethod,
    PostingKind,
    PostingStatus,
    POSTING_MODELS,
)
from fintrack.models.tenant import Tenant, TenantStatus
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.repositories.posting_repository import PostingRepository
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.schemas.posting_schemas import ExpenseCreate, IncomeCreate
from fintrack.services import installment_expander
from fintrack.services.audit_logger import AuditLogger, snapshot
from fintrack.services.currency_normalizer import CurrencyNormalizer
from fintrack.services.entity_resolver import EntityResolver, normalize_tax_id

logger = logging.getLogger(__name__)


@dataclass
class RecordResult:
    """IDs of the committed postings plus any audit events that could not be stored."""

    posting_ids: list[int]
    audit_failures: list[AuditWriteException] = field(default_factory=list)


class LedgerRecorder:
    """
    Turns one user-entered transaction into persisted postings.

    resolve entity -> normalize currency -> expand installments -> one
    atomic write -> one audit event per posting. Nothing is written when
    any step before the commit fails.
    """

    def __init__(
        self,
        db: Session,
        normalizer: CurrencyNormalizer,
        audit_logger: AuditLogger,
        entity_resolver: EntityResolver | None = None,
    ):
        self.db = db
        self.normalizer = normalizer
        self.audit_logger = audit_logger
        self.entity_resolver = entity_resolver or EntityResolver(db)
        self.tenant_repo = TenantRepository(db)
        self.category_repo = CategoryRepository(db)

    def record(
        self,
        tenant_id: int,
        user_id: int,
        entry: ExpenseCreate | IncomeCreate,
        kind: PostingKind = PostingKind.EXPENSE,
    ) -> RecordResult:
        """
        Record an expense or income entry.

        Args:
            tenant_id: Tenant the entry belongs to
            user_id: User entering it
            entry: Validated entry fields
            kind: EXPENSE or INCOME; selects the posting table

        Returns:
            RecordResult with one posting ID per installment

        Raises:
            NotFoundException: Tenant or category not found in tenant
            ForbiddenException: Tenant is not active
            ValidationException: Malformed entry
            DuplicateReceiptException: Fingerprint already recorded
            RateUnavailableException: No FX rate for the entry currency
        """
        tenant = self._get_active_tenant(tenant_id)
        entity_name = (entry.entity_name or "").strip() or None
        self._validate(tenant, entry, kind, entity_name)
        tax_id = normalize_tax_id(entry.entity_tax_id)
        repo = PostingRepository(self.db, POSTING_MODELS[kind])

        if entry.fingerprint and repo.fingerprint_exists(tenant_id, entry.fingerprint):
            raise DuplicateReceiptException(entry.fingerprint)

        try:
            entity_id = None
            if entity_name:
                entity_id = self.entity_resolver.resolve(
                    tenant_id, entity_name, tax_id, entry.entity_type
                )

            base_total = self.normalizer.normalize(
                tenant_id, entry.amount, entry.currency, tenant.base_currency, entry.date
            )
        except (FinanceTrackerException, SQLAlchemyError):
            # Drop an entity flushed by the resolver; nothing may remain
            self.db.rollback()
            raise

        installments = getattr(entry, "installments", 1)
        drafts = installment_expander.expand(
            entry.amount,
            base_total,
            installments,
            entry.date,
            entry.notes,
            getattr(entry, "card_type", None),
        )
        postings = [
            self._build_posting(kind, tenant_id, user_id, entry, draft, entity_id, entity_name, tax_id)
            for draft in drafts
        ]

        try:
            repo.create_bulk(postings)
            if entry.fingerprint:
                repo.add_fingerprint_no_commit(tenant_id, entry.fingerprint)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # A concurrent request may have stored the same receipt first
            if entry.fingerprint and repo.fingerprint_exists(tenant_id, entry.fingerprint):
                raise DuplicateReceiptException(entry.fingerprint)
            logger.exception("Rolled back %d %s postings for tenant %s", len(postings), kind.value, tenant_id)
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Rolled back %d %s postings for tenant %s", len(postings), kind.value, tenant_id)
            raise

        posting_ids = [posting.id for posting in postings]
        logger.info(
            "Recorded %d %s posting(s) %s for tenant %s", len(posting_ids), kind.value, posting_ids, tenant_id
        )

        result = RecordResult(posting_ids=posting_ids)
        table = POSTING_MODELS[kind].__tablename__
        for posting in postings:
            failure = self.audit_logger.log_event(
                tenant_id, table, posting.id, "create", None, snapshot(posting), user_id
            )
            if failure is not None:
                result.audit_failures.append(failure)
        return result

    def _get_active_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        if tenant.status != TenantStatus.ACTIVE:
            raise ForbiddenException(f"Tenant {tenant_id} is not active")
        return tenant

    def _validate(
        self,
        tenant: Tenant,
        entry: ExpenseCreate | IncomeCreate,
        kind: PostingKind,
        entity_name: str | None,
    ) -> None:
        if entry.amount is None or entry.amount <= 0:
            raise ValidationException("Amount must be greater than 0")

        if entry.entity_tax_id and not entity_name:
            raise ValidationException("Entity name is required when a tax id is given")

        if kind == PostingKind.INCOME:
            return

        category = self.category_repo.get_by_id_and_tenant(entry.category_id, tenant.id)
        if not category:
            raise NotFoundException(f"Category {entry.category_id} not found")

        if entry.subcategory_id is not None:
            subcategory = self.category_repo.get_subcategory(entry.subcategory_id, tenant.id)
            if not subcategory or subcategory.category_id != category.id:
                raise ValidationException(
                    f"Subcategory {entry.subcategory_id} does not belong to category {category.id}"
                )

        if entry.installments < 1:
            raise ValidationException("Installment count must be at least 1")
        if entry.installments > 1 and entry.payment_method != PaymentMethod.CREDIT_CARD:
            raise ValidationException("Installments are only allowed for credit card payments")

    def _build_posting(
        self,
        kind: PostingKind,
        tenant_id: int,
        user_id: int,
        entry: ExpenseCreate | IncomeCreate,
        draft: installment_expander.PostingDraft,
        entity_id: int | None,
        entity_name: str | None,
        tax_id: str | None,
    ) -> Expense | Income:
        common = dict(
            tenant_id=tenant_id,
            user_id=user_id,
            date=draft.date,
            amount=draft.amount,
            currency=entry.currency.upper(),
            base_amount=draft.base_amount,
            entity_id=entity_id,
            entity_tax_id=tax_id,
            entity_name=entity_name,
            payment_method=entry.payment_method,
            notes=draft.notes,
            source=entry.source,
            status=PostingStatus.POSTED,
            is_recurring=entry.is_recurring,
            deleted=False,
            installments=draft.installments,
            installment_number=draft.installment_number,
            card_type=draft.card_type,
            fingerprint=entry.fingerprint,
        )
        if kind == PostingKind.EXPENSE:
            return Expense(
                category_id=entry.category_id,
                subcategory_id=entry.subcategory_id,
                **common,
            )
        return Income(category=entry.category, description=entry.description, **common)

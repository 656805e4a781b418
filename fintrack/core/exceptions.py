class FinanceTrackerException(Exception):
    """Base exception for finance tracker"""

    pass


class UnauthorizedException(FinanceTrackerException):
    """Raised when JWT validation fails"""

    pass


class NotFoundException(FinanceTrackerException):
    """Raised when resource not found"""

    pass


class ForbiddenException(FinanceTrackerException):
    """Raised when user lacks the role for an operation"""

    pass


class ValidationException(FinanceTrackerException):
    """Raised for malformed input; nothing has been written"""

    pass


class ConflictException(FinanceTrackerException):
    """Raised when a write collides with an existing unique record"""

    pass


class DuplicateReceiptException(ConflictException):
    """Raised when a receipt fingerprint was already recorded for the tenant"""

    def __init__(self, fingerprint: str):
        super().__init__(f"Receipt {fingerprint} was already recorded")
        self.fingerprint = fingerprint


class RateUnavailableException(FinanceTrackerException):
    """Raised when no FX rate can be obtained; the enclosing write is aborted"""

    def __init__(self, currency: str, base_currency: str, reason: str = ""):
        message = f"No exchange rate available for {currency}->{base_currency}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.currency = currency
        self.base_currency = base_currency


class PartialProvisionException(FinanceTrackerException):
    """
    Raised when provisioning phase 2 failed after phase 1 committed.

    The tenant exists with its owner membership but without license or
    categories. Callers resume via TenantProvisioner.complete_provisioning.
    """

    def __init__(self, tenant_id: int, reason: str = ""):
        message = f"Tenant {tenant_id} is partially provisioned"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.tenant_id = tenant_id


class PermissionDeniedException(FinanceTrackerException):
    """Raised when a write is rejected by access rules"""

    def __init__(self, operation: str, target: str, payload: dict | None = None):
        super().__init__(f"Permission denied: {operation} on {target}")
        self.operation = operation
        self.target = target
        self.payload = payload or {}


class AuditWriteException(FinanceTrackerException):
    """Reported (never raised to callers) when an audit event could not be stored"""

    def __init__(self, entity_type: str, entity_id: str, action: str, reason: str = ""):
        super().__init__(f"Failed to write audit log for {entity_type}/{entity_id} ({action}): {reason}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.action = action

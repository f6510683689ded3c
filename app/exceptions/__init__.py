"""Custom exceptions for the veterinary clinic application."""


class ClinicError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(ClinicError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(ClinicError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class TenantNotFoundError(NotFoundError):
    """Raised when a tenant id does not resolve."""
    def __init__(self, tenant_id=None):
        super().__init__("Tenant not found", payload={'tenant_id': tenant_id})
        self.tenant_id = tenant_id


class AccountRestrictedError(ClinicError):
    """Raised when a Restricted or Suspended tenant attempts a gated operation.

    Kept distinct from QuotaExceededError so clients can prompt for billing
    action instead of a plan upgrade.
    """
    def __init__(self, status=None):
        super().__init__("Account restricted", 403, payload={'account_status': status})
        self.account_status = status


class QuotaExceededError(ClinicError):
    """Raised when a plan ceiling would be exceeded."""

    MESSAGES = {
        'storage': 'Storage quota exceeded.',
        'users': 'User limit reached.',
        'clients': 'Client limit reached.',
    }

    def __init__(self, resource_kind):
        kind = getattr(resource_kind, 'value', resource_kind)
        message = self.MESSAGES.get(kind, f'Quota exceeded for {kind}.')
        super().__init__(message, 403, payload={'resource': kind})
        self.resource_kind = kind


class InsufficientStockError(BusinessLogicError):
    """Raised when a sale would take an item below zero stock."""
    def __init__(self, item_name, available):
        avail_fmt = f"{int(available)}" if available % 1 == 0 else f"{available:.2f}".rstrip('0').rstrip('.')
        message = f"Low stock: {item_name} (Only {avail_fmt} left)"
        super().__init__(message, status_code=409)


class UnauthorizedError(ClinicError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access", status_code=403):
        super().__init__(message, status_code)

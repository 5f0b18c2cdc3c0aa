"""
Domain Errors

Every failure the core reports maps to one of these kinds. Each kind has a
stable machine code and HTTP status so callers can tell them apart.
"""


class DomainError(Exception):
    """Base class for errors raised by domain and application code"""

    code = 'domain_error'
    status_code = 400
    default_message = 'Request could not be processed'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    code = 'not_found'
    status_code = 404
    default_message = 'Resource not found'


class Unauthenticated(DomainError):
    code = 'unauthenticated'
    status_code = 401
    default_message = 'Authentication required'


class Forbidden(DomainError):
    code = 'forbidden'
    status_code = 403
    default_message = 'Not authorized to perform this action'


class InvalidState(DomainError):
    code = 'invalid_state'
    status_code = 409
    default_message = 'Operation not allowed in the current state'


class AlreadyExists(DomainError):
    code = 'already_exists'
    status_code = 409
    default_message = 'Resource already exists'


class UnknownPricingOption(DomainError):
    code = 'unknown_pricing_option'
    status_code = 400
    default_message = 'Invalid pricing option selected'

    def __init__(self, option_id: str):
        self.option_id = option_id
        super().__init__()


class ValidationFailed(DomainError):
    code = 'validation_failed'
    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, message: str | None = None, details=None):
        self.details = details
        super().__init__(message)


class ConcurrentModification(DomainError):
    code = 'concurrent_modification'
    status_code = 409
    default_message = 'Resource was modified by another request'


class DuplicateReference(DomainError):
    code = 'duplicate_reference'
    status_code = 409
    default_message = 'Booking reference already exists'


class PaymentGatewayError(DomainError):
    code = 'payment_gateway_error'
    status_code = 502
    default_message = 'Payment provider request failed'


class PaymentsNotConfigured(DomainError):
    code = 'payments_not_configured'
    status_code = 503
    default_message = 'Payment service not configured'

"""dashgate exception hierarchy."""


class DashgateError(Exception):
    """Base exception for all dashgate errors."""

    def __init__(self, message: str = "", code: str = "DASHGATE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


# ── Request-time authorization ──


class MissingCredentialError(DashgateError):
    """Raised when a request carries no API key in the header or query string."""

    def __init__(self, message: str = "API key missing"):
        super().__init__(message, code="MISSING_CREDENTIAL")


class MissingResourceError(DashgateError):
    """Raised when no dashboard identifier can be extracted from the request path."""

    def __init__(self, message: str = "Dashboard UID missing from request path"):
        super().__init__(message, code="MISSING_RESOURCE")


class InvalidCredentialError(DashgateError):
    """Raised when a presented API key matches no active key."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message, code="INVALID_CREDENTIAL")


class PermissionDeniedError(DashgateError):
    """Raised when a valid key's tenant has no grant for the dashboard."""

    def __init__(self, message: str = "Tenant does not have permission for this dashboard"):
        super().__init__(message, code="PERMISSION_DENIED")


# ── Administrative operations ──


class NotFoundError(DashgateError):
    """Raised when a requested record does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class TenantNotFoundError(NotFoundError):
    """Raised when a tenant cannot be found in the database."""

    def __init__(self, message: str = "Tenant not found"):
        super().__init__(message)


class PermissionNotFoundError(NotFoundError):
    """Raised when revoking a dashboard grant that does not exist."""

    def __init__(self, message: str = "Dashboard permission not found"):
        super().__init__(message)


class ConflictError(DashgateError):
    """Raised on a uniqueness violation (tenant name, short code, or grant).

    ``field`` names the attribute that collided so administrative callers
    can tell a duplicate name from a duplicate short code.
    """

    def __init__(self, message: str = "Resource already exists", field: str = ""):
        self.field = field
        super().__init__(message, code="CONFLICT")


class InvalidArgumentError(DashgateError):
    """Raised for malformed administrative input."""

    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message, code="INVALID_ARGUMENT")


class InternalInconsistencyError(DashgateError):
    """Raised when stored data violates an invariant the service relies on."""

    def __init__(self, message: str = "Stored data is inconsistent"):
        super().__init__(message, code="INTERNAL_INCONSISTENCY")

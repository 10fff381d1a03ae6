from typing import Optional, Any

class AdminConsoleError(Exception):
    """
    Base exception for the admin console application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(AdminConsoleError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AdminIdentityMissingError(AdminConsoleError):
    """
    Raised when the acting admin carries no resolvable identity.
    """
    def __init__(self, message: str = "Admin information not found. Please login again.", details: Optional[Any] = None):
        super().__init__(message, code="ADMIN_IDENTITY_MISSING", status_code=401, details=details)

class AlreadyProcessedError(AdminConsoleError):
    """
    Raised when a transition is attempted on a request that is no longer pending.
    """
    def __init__(self, message: str = "Request has already been processed", details: Optional[Any] = None):
        super().__init__(message, code="ALREADY_PROCESSED", status_code=409, details=details)

class PersistenceFailureError(AdminConsoleError):
    """
    Raised when a document store read or write fails mid-workflow.
    Earlier writes of the same call may already be committed.
    """
    def __init__(self, message: str = "Persistence failure", details: Optional[Any] = None):
        super().__init__(message, code="PERSISTENCE_FAILURE", status_code=503, details=details)

class ValidationError(AdminConsoleError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

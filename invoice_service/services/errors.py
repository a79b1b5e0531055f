"""
Invoice pipeline exceptions
"""


class InvoicePipelineError(Exception):
    """Base exception for invoice pipeline errors"""
    code = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RenderError(InvoicePipelineError):
    """Order snapshot could not be rendered (missing or malformed fields)"""
    pass


class StoreError(InvoicePipelineError):
    """Artifact write or URL signing failed"""
    pass


class StatusUpdateError(InvoicePipelineError):
    """Invoice outcome could not be written back onto the order"""
    pass


class AuthenticationError(InvoicePipelineError):
    """Caller is not authenticated"""
    code = "unauthenticated"


class InvalidArgumentError(InvoicePipelineError):
    """Request is missing a required argument"""
    code = "invalid-argument"


class NotFoundError(InvoicePipelineError):
    """Order not found"""
    code = "not-found"


class PermissionDeniedError(InvoicePipelineError):
    """Caller is neither the order owner nor an admin"""
    code = "permission-denied"

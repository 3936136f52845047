# =============================================================================
# app/exceptions.py - Error Taxonomy and Exception Handlers
# =============================================================================
# Every error the service raises on purpose derives from TakobinException and
# falls into one of four families that map to a stable HTTP status:
#
#   NotFoundError      -> 404
#   ForbiddenError     -> 403
#   UnauthorizedError  -> 401
#   InvalidInputError  -> 400 (413 for oversized files)
#
# Messages never carry password hashes or another paste's data.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TakobinException(Exception):
    """
    Base exception for the Takobin API.

    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TAKOBIN_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Taxonomy Roots
# =============================================================================

class NotFoundError(TakobinException):
    """The requested paste or file does not exist."""

    def __init__(self, message: str, code: str = "NOT_FOUND", **kwargs: Any):
        super().__init__(message, code=code, status_code=404, **kwargs)


class ForbiddenError(TakobinException):
    """The caller may not see or change this resource."""

    def __init__(self, message: str, code: str = "FORBIDDEN", **kwargs: Any):
        super().__init__(message, code=code, status_code=403, **kwargs)


class UnauthorizedError(TakobinException):
    """A credential is missing or wrong."""

    def __init__(self, message: str, code: str = "UNAUTHORIZED", **kwargs: Any):
        super().__init__(message, code=code, status_code=401, **kwargs)


class InvalidInputError(TakobinException):
    """Request failed validation before anything was written."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_INPUT",
        status_code: int = 400,
        **kwargs: Any,
    ):
        super().__init__(message, code=code, status_code=status_code, **kwargs)


# =============================================================================
# Paste Exceptions
# =============================================================================

class PasteNotFoundError(NotFoundError):
    """Raised when a paste ID doesn't exist."""

    def __init__(self, paste_id: str):
        super().__init__(
            f"Paste not found: {paste_id}",
            code="PASTE_NOT_FOUND",
            suggestion="Check the link; the paste may have been deleted by its owner",
            details={"paste_id": paste_id},
        )


class PasteExpiredError(ForbiddenError):
    """Raised when a paste's expiry timestamp has passed."""

    def __init__(self, paste_id: str):
        super().__init__(
            f"Paste has expired: {paste_id}",
            code="PASTE_EXPIRED",
            suggestion="Expired pastes cannot be recovered; ask the author to share it again",
            details={"paste_id": paste_id, "reason": "expired"},
        )


class PastePrivateError(ForbiddenError):
    """Raised when a private paste is requested by someone other than its owner."""

    def __init__(self, paste_id: str):
        super().__init__(
            f"Paste is private: {paste_id}",
            code="PASTE_PRIVATE",
            suggestion="Sign in as the paste owner to view it",
            details={"paste_id": paste_id, "reason": "private"},
        )


class NotPasteOwnerError(ForbiddenError):
    """Raised when a mutation is attempted by anyone but the owner."""

    def __init__(self, paste_id: str, action: str = "modify"):
        super().__init__(
            f"You don't have permission to {action} this paste",
            code="NOT_PASTE_OWNER",
            suggestion="Only the account that created a paste can change or delete it",
            details={"paste_id": paste_id, "action": action},
        )


class IncorrectPasswordError(UnauthorizedError):
    """Raised when the supplied paste password does not match."""

    def __init__(self, paste_id: str):
        super().__init__(
            "Incorrect password",
            code="INCORRECT_PASSWORD",
            suggestion="Check the password with the person who shared the paste",
            details={"paste_id": paste_id},
        )


class PasswordRequiredError(UnauthorizedError):
    """Raised when a protected paste's files are requested without a password."""

    def __init__(self, paste_id: str):
        super().__init__(
            "This paste is password protected",
            code="PASSWORD_REQUIRED",
            suggestion="Supply the paste password in the X-Paste-Password header",
            details={"paste_id": paste_id},
        )


class AuthenticationRequiredError(UnauthorizedError):
    """Raised when an account-scoped operation is called anonymously."""

    def __init__(self, action: str):
        super().__init__(
            f"You must be logged in to {action}",
            code="AUTHENTICATION_REQUIRED",
            suggestion="Send a valid bearer token in the Authorization header",
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class UploadNotFoundError(NotFoundError):
    """Raised when a file upload ID doesn't exist."""

    def __init__(self, file_id: str):
        super().__init__(
            f"File not found: {file_id}",
            code="FILE_NOT_FOUND",
            suggestion="Check that the file_id is correct",
            details={"file_id": file_id},
        )


class FileTooLargeError(InvalidInputError):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb},
        )


class StorageUploadError(TakobinException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def takobin_exception_handler(
    request: Request,
    exc: TakobinException
) -> JSONResponse:
    """
    Convert TakobinException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Reported as 400 like every other invalid-input error.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                for err in errors
            ] if isinstance(errors, list) else errors,
        }
    )

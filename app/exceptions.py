# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class OnboardingException(Exception):
    """
    Base exception for the onboarding API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "ONBOARDING_ERROR",
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
# Auth Exceptions
# =============================================================================

class AuthFailedError(OnboardingException):
    """Raised when Supabase Auth rejects a login, signup or reset."""

    def __init__(self, error: str):
        super().__init__(
            message=error,
            code="AUTH_FAILED",
            status_code=400,
            suggestion="Check the email and password and try again",
        )


class RoleForbiddenError(OnboardingException):
    """Raised when the user's role may not access a route."""

    def __init__(self, role: str, allowed: list[str], redirect: str):
        super().__init__(
            message=f"Role '{role}' cannot access this resource",
            code="ROLE_FORBIDDEN",
            status_code=403,
            suggestion=f"Use the {redirect} area for your role",
            details={"role": role, "allowed_roles": allowed, "redirect": redirect},
        )


# =============================================================================
# Wizard Exceptions
# =============================================================================

class InvalidStepError(OnboardingException):
    """Raised when a step number is outside the wizard."""

    def __init__(self, step: Any, total_steps: int):
        super().__init__(
            message=f"Invalid wizard step: {step}",
            code="INVALID_STEP",
            status_code=400,
            suggestion=f"Use a step between 1 and {total_steps}",
            details={"step": step, "total_steps": total_steps},
        )


class InvalidWizardPayloadError(OnboardingException):
    """Raised when an action payload doesn't fit the section it updates."""

    def __init__(self, action: str, error: str):
        super().__init__(
            message=f"Invalid payload for {action}: {error}",
            code="INVALID_PAYLOAD",
            status_code=422,
            suggestion="Send only the fields that belong to this wizard step",
            details={"action": action},
        )


class UnknownServiceError(OnboardingException):
    """Raised when the services step names a service not in the catalog."""

    def __init__(self, unknown: list[str], known: list[str]):
        super().__init__(
            message=f"Unknown service(s): {', '.join(unknown)}",
            code="UNKNOWN_SERVICE",
            status_code=400,
            suggestion=f"Choose from: {', '.join(known)}",
            details={"unknown": unknown},
        )


class ContractNotAcceptedError(OnboardingException):
    """Raised when the contract step is submitted without agreement."""

    def __init__(self):
        super().__init__(
            message="The service agreement must be accepted to continue",
            code="CONTRACT_NOT_ACCEPTED",
            status_code=400,
            suggestion="Review the contract and submit again with agreed=true",
        )


class QuoteChangedError(OnboardingException):
    """Raised when the stored contract no longer matches the quote for the answers."""

    def __init__(self):
        super().__init__(
            message="The contract on file does not match the current quote",
            code="QUOTE_CHANGED",
            status_code=409,
            suggestion="Return to the contract step and accept the current quote",
        )


class WizardIncompleteError(OnboardingException):
    """Raised when completion is requested before the final step."""

    def __init__(self, current_step: int, total_steps: int):
        super().__init__(
            message=f"Onboarding is on step {current_step} of {total_steps}",
            code="WIZARD_INCOMPLETE",
            status_code=409,
            suggestion="Finish every step and accept the contract before completing",
            details={"current_step": current_step, "total_steps": total_steps},
        )


class OnboardingSaveError(OnboardingException):
    """Raised when the completed wizard can't be written to the database."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to save onboarding data: {error}",
            code="ONBOARDING_SAVE_FAILED",
            status_code=502,
            suggestion="Your answers are kept; try completing again shortly",
            details={"error": error},
        )


# =============================================================================
# Record Exceptions
# =============================================================================

class ClientNotFoundError(OnboardingException):
    """Raised when a client profile doesn't exist."""

    def __init__(self, client_id: str):
        super().__init__(
            message=f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the client_id is correct",
            details={"client_id": client_id},
        )


class DocumentNotFoundError(OnboardingException):
    """Raised when a document ID doesn't exist or isn't visible to the user."""

    def __init__(self, document_id: str):
        super().__init__(
            message=f"Document not found: {document_id}",
            code="DOCUMENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the document_id is correct",
            details={"document_id": document_id},
        )


class AssignmentNotFoundError(OnboardingException):
    """Raised when a tech assignment doesn't exist or isn't the tech's own."""

    def __init__(self, assignment_id: str):
        super().__init__(
            message=f"Assignment not found: {assignment_id}",
            code="ASSIGNMENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the assignment_id is correct",
            details={"assignment_id": assignment_id},
        )


class ClientRequiredError(OnboardingException):
    """Raised when admin/tech upload without choosing a client."""

    def __init__(self):
        super().__init__(
            message="Please select a client",
            code="CLIENT_REQUIRED",
            status_code=400,
            suggestion="Pass client_id when uploading on behalf of a client",
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(OnboardingException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(OnboardingException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(OnboardingException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class StorageDownloadError(OnboardingException):
    """Raised when file download from storage fails."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to download file from storage: {error}",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"path": path, "error": error}
        )


class StorageDeleteError(OnboardingException):
    """Raised when a storage object can't be removed."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to delete file from storage: {error}",
            code="STORAGE_DELETE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"path": path, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def onboarding_exception_handler(
    request: Request,
    exc: OnboardingException
) -> JSONResponse:
    """
    Convert OnboardingException to JSON response.

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


async def supabase_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Surface data-layer failures with the backend's own message.

    The message is what the dashboards show in their error banner.
    """
    return JSONResponse(
        status_code=502,
        content={
            "detail": getattr(exc, "message", str(exc)),
            "code": getattr(exc, "code", "SUPABASE_ERROR"),
        }
    )

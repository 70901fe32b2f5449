# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .assignment_service import AssignmentService
from .auth_service import AuthService
from .document_service import DocumentService
from .note_service import NoteService
from .profile_service import ProfileService
from .storage_service import StorageService
from .wizard_service import WizardService, WizardStateStore

__all__ = [
    "AssignmentService",
    "AuthService",
    "DocumentService",
    "NoteService",
    "ProfileService",
    "StorageService",
    "WizardService",
    "WizardStateStore",
]

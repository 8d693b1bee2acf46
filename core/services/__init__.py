# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .account_service import AccountService
from .application_service import ApplicationService
from .attachment_link_service import AttachmentLinkService
from .audit_service import AuditService
from .auth_service import AuthService
from .billing_service import BillingService
from .contact_service import ContactService
from .csv_service import CsvService
from .dashboard_service import DashboardService
from .document_service import DocumentService
from .email_preferences_service import EmailPreferencesService
from .interview_service import InterviewService
from .label_service import LabelService
from .note_service import NoteService
from .oauth_service import OAuthService
from .onboarding_service import OnboardingService
from .plan_service import PlanService
from .reminder_service import ReminderService
from .salary_offer_service import SalaryOfferService
from .session_service import SessionService
from .task_service import TaskService
from .two_factor_service import TwoFactorService

__all__ = [
    "AccountService",
    "ApplicationService",
    "AttachmentLinkService",
    "AuditService",
    "AuthService",
    "BillingService",
    "ContactService",
    "CsvService",
    "DashboardService",
    "DocumentService",
    "EmailPreferencesService",
    "InterviewService",
    "LabelService",
    "NoteService",
    "OAuthService",
    "OnboardingService",
    "PlanService",
    "ReminderService",
    "SalaryOfferService",
    "SessionService",
    "TaskService",
    "TwoFactorService",
]

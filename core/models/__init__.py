# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - common.py: Enums, base schemas, pagination envelopes
# - application.py: Job application CRUD, list filters, bulk and import
# - interview.py, task.py, note.py, contact.py, attachment_link.py,
#   document.py, label.py, salary_offer.py: Child resource schemas
# - email_preferences.py: Notification settings
# - session.py: Login session listing
# - account.py: Linked sign-in methods
# - dashboard.py: Analytics, timeline and audit entries
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Shared
# -----------------------------------------------------------------------------
from .common import (
    AuditAction,
    DigestFrequency,
    DocumentType,
    InputSchema,
    InterviewResult,
    InterviewType,
    ItemList,
    JobType,
    OfferType,
    OkResponse,
    OutputSchema,
    Page,
    Plan,
    Priority,
    RemoteType,
    Stage,
    TaskStatus,
)

# -----------------------------------------------------------------------------
# Applications
# -----------------------------------------------------------------------------
from .application import (
    ApplicationCreate,
    ApplicationListParams,
    ApplicationResponse,
    ApplicationUpdate,
    BulkOperationRequest,
    BulkOperationResult,
    ImportRequest,
    ImportResult,
    TagCount,
)

# -----------------------------------------------------------------------------
# Child Resources
# -----------------------------------------------------------------------------
from .attachment_link import AttachmentLinkCreate, AttachmentLinkResponse, AttachmentLinkUpdate
from .contact import ContactCreate, ContactResponse, ContactUpdate
from .document import DocumentCreate, DocumentResponse, DocumentUpdate
from .interview import InterviewCreate, InterviewResponse, InterviewUpdate
from .label import LabelCreate, LabelResponse, LabelUpdate
from .note import NoteCreate, NoteResponse, NoteUpdate
from .salary_offer import SalaryOfferCreate, SalaryOfferResponse, SalaryOfferUpdate
from .task import TaskCreate, TaskResponse, TaskUpdate

# -----------------------------------------------------------------------------
# Account, Sessions, Preferences, Dashboard
# -----------------------------------------------------------------------------
from .account import ChangePasswordResponse, ConnectionInfo, ConnectionsResponse
from .dashboard import AuditEntryResponse, DashboardSummary, TimelineEvent, WeeklyCount
from .email_preferences import EmailPreferencesResponse, EmailPreferencesUpdate
from .session import RevokeAllResponse, SessionInfo, SessionList

__all__ = [
    # Shared
    "AuditAction",
    "DigestFrequency",
    "DocumentType",
    "InputSchema",
    "InterviewResult",
    "InterviewType",
    "ItemList",
    "JobType",
    "OfferType",
    "OkResponse",
    "OutputSchema",
    "Page",
    "Plan",
    "Priority",
    "RemoteType",
    "Stage",
    "TaskStatus",
    # Applications
    "ApplicationCreate",
    "ApplicationListParams",
    "ApplicationResponse",
    "ApplicationUpdate",
    "BulkOperationRequest",
    "BulkOperationResult",
    "ImportRequest",
    "ImportResult",
    "TagCount",
    # Child resources
    "AttachmentLinkCreate",
    "AttachmentLinkResponse",
    "AttachmentLinkUpdate",
    "ContactCreate",
    "ContactResponse",
    "ContactUpdate",
    "DocumentCreate",
    "DocumentResponse",
    "DocumentUpdate",
    "InterviewCreate",
    "InterviewResponse",
    "InterviewUpdate",
    "LabelCreate",
    "LabelResponse",
    "LabelUpdate",
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
    "SalaryOfferCreate",
    "SalaryOfferResponse",
    "SalaryOfferUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    # Account, sessions, preferences, dashboard
    "ChangePasswordResponse",
    "ConnectionInfo",
    "ConnectionsResponse",
    "AuditEntryResponse",
    "DashboardSummary",
    "TimelineEvent",
    "WeeklyCount",
    "EmailPreferencesResponse",
    "EmailPreferencesUpdate",
    "RevokeAllResponse",
    "SessionInfo",
    "SessionList",
]

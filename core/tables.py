# =============================================================================
# core/tables.py - ORM Table Definitions
# =============================================================================
# SQLAlchemy mapped classes for every persisted entity.
#
# Conventions:
# - ids are uuid4 strings
# - every owned row carries user_id; queries always filter on it
# - soft-deletable rows carry deleted_at (see SoftDeleteMixin)
# - list-valued fields (tags, interviewers, backup codes) are JSON columns
# =============================================================================

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from lib.database import Base, UTCDateTime, utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Mixins
# =============================================================================

class TimestampMixin:
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)


class SoftDeleteMixin:
    """Mixin that adds soft delete functionality to models."""

    deleted_at = Column(UTCDateTime, nullable=True, index=True)

    def soft_delete(self) -> None:
        """Mark this record as deleted by setting deleted_at timestamp."""
        self.deleted_at = utcnow()

    def restore(self) -> None:
        self.deleted_at = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# =============================================================================
# Users / Auth
# =============================================================================

class User(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(120))
    # Null for OAuth-only accounts
    password_hash = Column(String(255))
    plan = Column(String(10), nullable=False, default="FREE")
    stripe_customer_id = Column(String(255), unique=True)
    stripe_subscription_id = Column(String(255))
    plan_updated_at = Column(UTCDateTime)

    two_factor_enabled = Column(Boolean, nullable=False, default=False)
    two_factor_secret = Column(Text)
    backup_codes = Column(JSON, nullable=False, default=list)

    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan")


class Account(TimestampMixin, Base):
    """Link between a user and an OAuth provider identity."""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_account_id", name="uq_account_provider"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String(32), nullable=False)
    provider_account_id = Column(String(255), nullable=False)

    user = relationship("User", back_populates="accounts")


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    session_token_hash = Column(String(64), unique=True, nullable=False, index=True)
    user_agent = Column(Text)
    ip_address = Column(String(64))
    device_type = Column(String(20))
    browser = Column(String(50))
    os = Column(String(50))
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    last_active_at = Column(UTCDateTime, nullable=False, default=utcnow)
    expires_at = Column(UTCDateTime, nullable=False, index=True)
    revoked_at = Column(UTCDateTime)


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)
    used_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String(40), nullable=False, index=True)
    entity_type = Column(String(40))
    entity_id = Column(String(36), index=True)
    ip = Column(String(64))
    user_agent = Column(Text)
    meta = Column(JSON)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)


class EmailPreferences(TimestampMixin, Base):
    __tablename__ = "email_preferences"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    interview_reminder = Column(Boolean, nullable=False, default=True)
    interview_reminder_hours = Column(Integer, nullable=False, default=24)
    task_reminder = Column(Boolean, nullable=False, default=True)
    task_reminder_hours = Column(Integer, nullable=False, default=24)
    follow_up_reminder = Column(Boolean, nullable=False, default=True)
    status_change_notify = Column(Boolean, nullable=False, default=True)
    digest_frequency = Column(String(10), nullable=False, default="WEEKLY")
    digest_day = Column(Integer, nullable=False, default=1)
    digest_hour = Column(Integer, nullable=False, default=9)
    stale_alert_enabled = Column(Boolean, nullable=False, default=True)
    stale_alert_days = Column(Integer, nullable=False, default=14)
    marketing_emails = Column(Boolean, nullable=False, default=False)
    unsubscribed_all = Column(Boolean, nullable=False, default=False)


# =============================================================================
# Job Applications and Children
# =============================================================================

class JobApplication(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "job_applications"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company = Column(String(120), nullable=False)
    title = Column(String(120), nullable=False)
    location = Column(String(120))
    url = Column(Text)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String(10))
    stage = Column(String(20), nullable=False, default="SAVED", index=True)
    applied_date = Column(UTCDateTime)
    source = Column(String(120))
    tags = Column(JSON, nullable=False, default=list)
    priority = Column(String(10), nullable=False, default="MEDIUM")
    remote_type = Column(String(10))
    job_type = Column(String(20))
    description = Column(Text)
    next_follow_up = Column(UTCDateTime)
    rejection_reason = Column(String(500))


class Interview(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_at = Column(UTCDateTime, nullable=False, index=True)
    duration = Column(Integer, nullable=False, default=60)
    type = Column(String(20), nullable=False, default="VIDEO")
    location = Column(String(500))
    interviewers = Column(JSON, nullable=False, default=list)
    notes = Column(Text)
    feedback = Column(Text)
    result = Column(String(20), nullable=False, default="PENDING")
    reminder_sent = Column(Boolean, nullable=False, default=False)

    application = relationship("JobApplication")


class Task(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="SET NULL"), index=True)
    title = Column(String(200), nullable=False)
    due_date = Column(UTCDateTime)
    status = Column(String(10), nullable=False, default="OPEN")

    application = relationship("JobApplication")


class Note(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)


class Contact(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="SET NULL"), index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255))
    phone = Column(String(40))
    role = Column(String(120))
    company = Column(String(120))


class AttachmentLink(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "attachment_links"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(120), nullable=False)
    url = Column(String(2000), nullable=False)


class Document(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="SET NULL"), index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default="RESUME")
    file_name = Column(String(500), nullable=False)
    file_url = Column(Text)
    file_content = Column(Text)
    version = Column(String(50))
    is_default = Column(Boolean, nullable=False, default=False)


class Label(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "labels"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(30), nullable=False)
    color = Column(String(7), nullable=False, default="#6366f1")


class SalaryOffer(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "salary_offers"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("job_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False, default="INITIAL")
    base_salary = Column(Integer, nullable=False)
    bonus = Column(Integer)
    signing_bonus = Column(Integer)
    equity = Column(String(500))
    benefits = Column(String(1000))
    notes = Column(String(2000))
    offer_date = Column(UTCDateTime, nullable=False, default=utcnow)
    is_accepted = Column(Boolean)
    currency = Column(String(3), nullable=False, default="USD")

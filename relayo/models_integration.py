"""
Integration Models
One row per (workspace, provider) holding provider credentials and config
"""

import enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base
from .shared.timeutils import utcnow


class IntegrationProvider(str, enum.Enum):
    GOOGLE = "GOOGLE"  # Calendar + Sheets
    TWILIO = "TWILIO"  # SMS


class Integration(Base):
    __tablename__ = "integrations"
    __table_args__ = (
        UniqueConstraint("workspace_id", "provider", name="uq_integration_workspace_provider"),
    )

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    provider = Column(String(20), nullable=False, index=True)
    label = Column(String(255), nullable=True)

    # Google OAuth tokens (encrypted)
    google_access_token = Column(Text, nullable=True)
    google_refresh_token = Column(Text, nullable=True)
    google_token_expires_at = Column(DateTime, nullable=True)
    google_user_email = Column(String(255), nullable=True)

    # Google config
    google_calendar_ids = Column(JSON, default=list, nullable=False)
    google_sheets_url = Column(String(1000), nullable=True)

    # Twilio credentials (encrypted)
    twilio_account_sid = Column(Text, nullable=True)
    twilio_auth_token = Column(Text, nullable=True)
    twilio_from_number = Column(String(32), nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    workspace = relationship("Workspace", back_populates="integrations")

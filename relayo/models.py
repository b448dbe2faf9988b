from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .models_integration import Integration  # noqa: F401 - registers the mapper for relationships
from .shared.timeutils import utcnow

RESERVATION_STATUSES = ("confirmed", "pending", "cancelled", "completed", "no-show")
RESERVATION_SOURCES = ("WEB", "CALENDAR_SYNC", "MANUAL", "PHONE", "SMS")
MESSAGE_DIRECTIONS = ("inbound", "outbound")


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    memberships = relationship("Membership", back_populates="workspace")
    customers = relationship("Customer", back_populates="workspace")
    reservations = relationship("Reservation", back_populates="workspace")
    messages = relationship("Message", back_populates="workspace")
    integrations = relationship("Integration", back_populates="workspace")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Subject claim of the verified bearer token
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    memberships = relationship("Membership", back_populates="user", lazy="joined")

    @property
    def workspace_id(self):
        return self.memberships[0].workspace_id if self.memberships else None


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)
    # unique: a user belongs to at most one workspace
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="owner")

    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="memberships")
    workspace = relationship("Workspace", back_populates="memberships")


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_workspace_phone", "workspace_id", "phone"),
        Index("ix_customers_workspace_email", "workspace_id", "email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    workspace = relationship("Workspace", back_populates="customers")
    reservations = relationship(
        "Reservation", back_populates="customer", order_by="Reservation.start.desc()"
    )
    messages = relationship("Message", back_populates="customer", order_by="Message.created_at.desc()")


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    integration_id = Column(Integer, ForeignKey("integrations.id"), nullable=True)

    # Join key to the external calendar event, unique across all workspaces
    event_id = Column(String(255), unique=True, index=True, nullable=False)
    calendar_id = Column(String(500), nullable=True)

    title = Column(String(500), nullable=False)
    service = Column(String(255), nullable=True)
    staff = Column(String(255), nullable=True)
    source = Column(String(20), nullable=False, default="WEB")
    status = Column(String(20), nullable=False, default="confirmed")
    notes = Column(Text, nullable=True)

    start = Column(DateTime, nullable=False, index=True)
    end = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    workspace = relationship("Workspace", back_populates="reservations")
    customer = relationship("Customer", back_populates="reservations")
    integration = relationship("Integration")


class Message(Base):
    """Append-only SMS log"""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)

    direction = Column(String(10), nullable=False)  # inbound, outbound
    channel = Column(String(20), nullable=False, default="sms")
    body = Column(Text, nullable=False)
    from_number = Column(String(32), nullable=True)
    to_number = Column(String(32), nullable=True)
    provider_message_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    workspace = relationship("Workspace", back_populates="messages")
    customer = relationship("Customer", back_populates="messages")

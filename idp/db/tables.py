"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in idp/models/; repos
convert between rows and dataclasses. Schema versioning is owned by the
migration tool, not by this service.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from idp.db.engine import Base


class ClientRow(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    authorized_domains: Mapped[list[str]] = mapped_column(
        ARRAY(Text), nullable=False, default=[]
    )


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    email_verified: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )  # NULL until a password is set
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # Settles concurrent registrations of the same email.
    __table_args__ = (UniqueConstraint("tenant_id", "email"),)


# --- Token exchange (schema only — written by the token endpoint) ---


class SessionRow(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    client_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    response_type: Mapped[str] = mapped_column(String(64), nullable=False)
    scope: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    state: Mapped[str] = mapped_column(Text, nullable=False, default="")
    nonce: Mapped[str] = mapped_column(Text, nullable=False, default="")
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    # Set when the code is redeemed; a non-NULL value rejects replays.
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    refreshed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

"""SQLAlchemy models for saved passports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SavedPassportRecord(Base):
    __tablename__ = "saved_passports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    document_number: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    nationality: Mapped[str | None] = mapped_column(String(8), nullable=True)
    expiry_date: Mapped[str | None] = mapped_column(String(16), nullable=True)
    bac_success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    chip_auth_success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_authenticated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    record: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class PassportPhotoRecord(Base):
    __tablename__ = "passport_photos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    passport_id: Mapped[str] = mapped_column(
        ForeignKey("saved_passports.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    image_data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

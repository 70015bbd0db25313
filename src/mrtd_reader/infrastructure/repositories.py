"""Database repositories for saved passports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PassportPhotoRecord, SavedPassportRecord


class PassportRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        passport_id: str,
        record: dict[str, Any],
        *,
        full_name: str | None,
        document_number: str | None,
        nationality: str | None,
        expiry_date: str | None,
        bac_success: bool,
        chip_auth_success: bool,
        is_authenticated: bool,
        photo: bytes | None = None,
        created_at: datetime | None = None,
    ) -> SavedPassportRecord:
        row = SavedPassportRecord(
            id=passport_id,
            record=record,
            full_name=full_name,
            document_number=document_number,
            nationality=nationality,
            expiry_date=expiry_date,
            bac_success=bac_success,
            chip_auth_success=chip_auth_success,
            is_authenticated=is_authenticated,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._session.add(row)
        await self._session.flush()
        if photo is not None:
            self._session.add(PassportPhotoRecord(passport_id=passport_id, image_data=photo))
            await self._session.flush()
        return row

    async def get(self, passport_id: str) -> Optional[SavedPassportRecord]:
        stmt = select(SavedPassportRecord).where(SavedPassportRecord.id == passport_id)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def list_all(self) -> list[SavedPassportRecord]:
        stmt = select(SavedPassportRecord).order_by(SavedPassportRecord.created_at.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_photo(self, passport_id: str) -> Optional[bytes]:
        stmt = select(PassportPhotoRecord.image_data).where(
            PassportPhotoRecord.passport_id == passport_id
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def set_favorite(self, passport_id: str, favorite: bool) -> bool:
        stmt = (
            update(SavedPassportRecord)
            .where(SavedPassportRecord.id == passport_id)
            .values(is_favorite=favorite)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, passport_id: str) -> bool:
        await self._session.execute(
            delete(PassportPhotoRecord).where(PassportPhotoRecord.passport_id == passport_id)
        )
        result = await self._session.execute(
            delete(SavedPassportRecord).where(SavedPassportRecord.id == passport_id)
        )
        return result.rowcount > 0

    async def clear(self) -> int:
        count = await self.count()
        await self._session.execute(delete(PassportPhotoRecord))
        await self._session.execute(delete(SavedPassportRecord))
        return count

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(SavedPassportRecord))
        return int(result.scalar_one())

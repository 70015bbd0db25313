"""
Passport storage built on the async database helpers.

Each record is stored as one structured JSON document (the reconciler's serialized form) plus a
few scalar columns for listing. The photo lives in its own table and is loaded on demand.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mrtd_reader.exceptions import PersistenceError
from mrtd_reader.models.passport import PassportRecord
from mrtd_reader.reconciler import RecordReconciler

from .database import DatabaseManager
from .models import SavedPassportRecord
from .repositories import PassportRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SavedPassport:
    """Listing entry for a stored passport."""

    id: str
    full_name: str | None
    document_number: str | None
    nationality: str | None
    expiry_date: str | None
    is_authenticated: bool
    is_favorite: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row: SavedPassportRecord) -> SavedPassport:
        return cls(
            id=row.id,
            full_name=row.full_name,
            document_number=row.document_number,
            nationality=row.nationality,
            expiry_date=row.expiry_date,
            is_authenticated=row.is_authenticated,
            is_favorite=row.is_favorite,
            created_at=row.created_at,
        )


class PassportStore:
    """Save, list, load and delete passport records."""

    def __init__(
        self, database: DatabaseManager, reconciler: RecordReconciler | None = None
    ) -> None:
        self._database = database
        self._reconciler = reconciler or RecordReconciler()

    async def _run(self, operation: str, handler: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``handler`` in a transaction, rolling back and retrying once on failure."""
        try:
            return await self._database.run_within_transaction(handler)
        except SQLAlchemyError as exc:
            logger.warning("%s failed, rolled back and retrying: %s", operation, exc)

        try:
            return await self._database.run_within_transaction(handler)
        except SQLAlchemyError as exc:
            logger.error("%s failed after retry: %s", operation, exc)
            msg = f"{operation} failed: {exc}"
            raise PersistenceError(msg) from exc

    async def save(self, record: PassportRecord) -> str:
        """Persist a passport record and return its id."""
        payload = self._reconciler.serialize(record)
        payload.pop("photo", None)
        details = record.personal_details

        async def handler(session: AsyncSession) -> str:
            await PassportRepository(session).add(
                str(record.id),
                payload,
                full_name=details.full_name if details else None,
                document_number=details.document_number if details else record.mrz.document_number,
                nationality=details.nationality if details else None,
                expiry_date=record.expiry_date,
                bac_success=record.authentication.bac_success,
                chip_auth_success=record.authentication.chip_auth_success,
                is_authenticated=record.authentication.is_authenticated,
                photo=record.photo,
                created_at=record.created_at,
            )
            return str(record.id)

        passport_id = await self._run("Saving passport", handler)
        logger.info(
            "Passport %s saved (photo: %s, authenticated: %s)",
            passport_id,
            record.has_photo,
            record.authentication.is_authenticated,
            extra={"passport_id": passport_id},
        )
        return passport_id

    async def load(self, passport_id: str | UUID) -> PassportRecord | None:
        """
        Rebuild a stored record, photo included.

        Raises:
            PersistenceError: If the stored document no longer validates as a passport record
        """
        key = str(passport_id)

        async def handler(session: AsyncSession) -> dict[str, Any] | None:
            repo = PassportRepository(session)
            row = await repo.get(key)
            if row is None:
                return None
            payload = dict(row.record)
            photo = await repo.get_photo(key)
            if photo is not None:
                payload["photo"] = photo
            return payload

        payload = await self._run("Loading passport", handler)
        if payload is None:
            return None
        try:
            return self._reconciler.deserialize(payload)
        except ValidationError as exc:
            logger.error(
                "Stored passport %s is corrupted: %s", key, exc, extra={"passport_id": key}
            )
            msg = f"Stored passport {key} is corrupted"
            raise PersistenceError(msg) from exc

    async def list_saved(self) -> list[SavedPassport]:
        """Saved passports, newest first."""

        async def handler(session: AsyncSession) -> list[SavedPassport]:
            rows = await PassportRepository(session).list_all()
            return [SavedPassport.from_row(row) for row in rows]

        return await self._run("Listing passports", handler)

    async def load_photo(self, passport_id: str | UUID) -> bytes | None:
        key = str(passport_id)

        async def handler(session: AsyncSession) -> bytes | None:
            return await PassportRepository(session).get_photo(key)

        photo = await self._run("Loading photo", handler)
        if photo is None:
            logger.debug("No photo found for passport %s", key)
        return photo

    async def set_favorite(self, passport_id: str | UUID, favorite: bool = True) -> bool:
        key = str(passport_id)

        async def handler(session: AsyncSession) -> bool:
            return await PassportRepository(session).set_favorite(key, favorite)

        return await self._run("Updating favorite flag", handler)

    async def delete(self, passport_id: str | UUID) -> bool:
        """Delete a passport and its photo. Returns False if it did not exist."""
        key = str(passport_id)

        async def handler(session: AsyncSession) -> bool:
            return await PassportRepository(session).delete(key)

        deleted = await self._run("Deleting passport", handler)
        logger.info("Passport %s deleted: %s", key, deleted, extra={"passport_id": key})
        return deleted

    async def clear_all(self) -> int:
        """Delete every stored passport and photo; returns how many passports were removed."""

        async def handler(session: AsyncSession) -> int:
            return await PassportRepository(session).clear()

        removed = await self._run("Clearing passports", handler)
        logger.info("Cleared %d saved passports", removed)
        return removed

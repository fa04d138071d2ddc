"""SQLite storage for cart drafts.

Used when the draft edge function is missing or unreachable.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from datetime import datetime

import aiosqlite

from posbot.api.schemas import Draft, DraftItem

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = "data/posbot.db"
LOCAL_ID_PREFIX = "local-"


def is_local_draft_id(draft_id: str) -> bool:
    return draft_id.startswith(LOCAL_ID_PREFIX)


class LocalDraftStore:
    """SQLite-backed storage for drafts saved offline."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Ensure database and table exist."""
        if self._initialized:
            return

        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS local_drafts (
                    id TEXT PRIMARY KEY,
                    store_id TEXT NOT NULL,
                    draft_data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_local_drafts_store
                ON local_drafts(store_id, created_at)
            """)
            await db.commit()

        self._initialized = True

    async def save(
        self,
        name: str,
        store_id: str,
        items: list[DraftItem],
        notes: str | None = None,
    ) -> Draft:
        """Store a draft and return it with a local id."""
        await self._ensure_initialized()

        draft = Draft(
            id=f"{LOCAL_ID_PREFIX}{secrets.token_hex(8)}",
            name=name,
            notes=notes,
            items=items,
            total_amount=sum(i.quantity * i.unit_price for i in items),
            total_quantity=sum(i.quantity for i in items),
            store_id=store_id,
            created_at=datetime.now(),
        )

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO local_drafts (id, store_id, draft_data, created_at) VALUES (?, ?, ?, ?)",
                (draft.id, store_id, draft.model_dump_json(), draft.created_at.isoformat()),
            )
            await db.commit()

        logger.info("draft_saved_locally", extra={"draft_id": draft.id, "store_id": store_id})
        return draft

    async def list_drafts(self, store_id: str | None = None) -> list[Draft]:
        """Drafts newest first, optionally for one store."""
        await self._ensure_initialized()

        query = "SELECT draft_data FROM local_drafts"
        params: tuple = ()
        if store_id:
            query += " WHERE store_id = ?"
            params = (store_id,)
        query += " ORDER BY created_at DESC"

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()

        drafts = []
        for (raw,) in rows:
            try:
                drafts.append(Draft.model_validate(json.loads(raw)))
            except ValueError as e:
                logger.warning("local_draft_corrupt", extra={"error": str(e)})
        return drafts

    async def get(self, draft_id: str) -> Draft | None:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT draft_data FROM local_drafts WHERE id = ?", (draft_id,)
            )
            row = await cursor.fetchone()

        return Draft.model_validate(json.loads(row[0])) if row else None

    async def delete(self, draft_id: str) -> bool:
        """Delete a draft. Returns True if it existed."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM local_drafts WHERE id = ?", (draft_id,))
            await db.commit()
            return cursor.rowcount > 0

from __future__ import annotations

from sqlalchemy import text as sql_text

from zenplan_api.db import get_engine


USER_DOCUMENTS_TABLE = "user_documents"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USER_DOCUMENTS_TABLE} (
                    uid TEXT PRIMARY KEY,
                    payload_json TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )

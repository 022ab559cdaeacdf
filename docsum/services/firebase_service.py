import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from ..errors import SummaryNotFoundError

logger = logging.getLogger(__name__)

SUMMARIES = "summaries"
USERS = "users"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def initialize_firestore(credentials_value: str):
    """Initialise the Firebase app once and return a Firestore client.

    `credentials_value` is either a path to a service-account file or the JSON itself.
    """
    if not firebase_admin._apps:
        try:
            cred = credentials.Certificate(json.loads(credentials_value))
        except (json.JSONDecodeError, ValueError):
            cred = credentials.Certificate(credentials_value)
        firebase_admin.initialize_app(cred)
    return firestore.client()


class FirebaseService:
    def __init__(self, db):
        self._db = db

    # ── Summaries ─────────────────────────────────────────────────────────────

    def _do_save_summary(self, user_id: str, data: dict[str, Any]) -> str:
        now = _now()
        _, ref = self._db.collection(SUMMARIES).add(
            {"user_id": user_id, **data, "created_at": now, "updated_at": now}
        )
        return ref.id

    async def save_summary(self, user_id: str, data: dict[str, Any]) -> str:
        try:
            summary_id = await asyncio.to_thread(self._do_save_summary, user_id, data)
            logger.info("Saved summary %s for user %s to Firebase.", summary_id, user_id)
        except Exception as exc:
            logger.error("Firebase save_summary failed for %s: %s", user_id, exc, exc_info=True)
            raise

        words = (data.get("word_count") or {}).get("original", 0)
        await self.update_user_stats(user_id, words)
        return summary_id

    def _do_get_user_summaries(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        query = (
            self._db.collection(SUMMARIES)
            .where(filter=firestore.FieldFilter("user_id", "==", user_id))
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [{"id": doc.id, **doc.to_dict()} for doc in query.stream()]

    async def get_user_summaries(self, user_id: str, limit: int = 50) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._do_get_user_summaries, user_id, limit)

    def _existing(self, summary_id: str):
        ref = self._db.collection(SUMMARIES).document(summary_id)
        if not ref.get().exists:
            raise SummaryNotFoundError(summary_id)
        return ref

    def _do_update_summary(self, summary_id: str, updates: dict[str, Any]) -> None:
        self._existing(summary_id).update({**updates, "updated_at": _now()})

    async def update_summary(self, summary_id: str, updates: dict[str, Any]) -> None:
        await asyncio.to_thread(self._do_update_summary, summary_id, updates)
        logger.info("Updated summary %s.", summary_id)

    def _do_delete_summary(self, summary_id: str) -> None:
        self._existing(summary_id).delete()

    async def delete_summary(self, summary_id: str) -> None:
        await asyncio.to_thread(self._do_delete_summary, summary_id)
        logger.info("Deleted summary %s.", summary_id)

    # ── User stats ────────────────────────────────────────────────────────────

    def _do_update_user_stats(self, user_id: str, words_processed: int) -> None:
        self._db.collection(USERS).document(user_id).set(
            {
                "summaries_count": firestore.Increment(1),
                "words_processed": firestore.Increment(words_processed),
                "last_activity": _now(),
            },
            merge=True,
        )

    async def update_user_stats(self, user_id: str, words_processed: int) -> None:
        # Stats are best-effort; a failed update never fails the save.
        try:
            await asyncio.to_thread(self._do_update_user_stats, user_id, words_processed)
        except Exception as exc:
            logger.error("Firebase update_user_stats failed for %s: %s", user_id, exc, exc_info=True)


def create_firebase_service(credentials_value: str) -> Optional[FirebaseService]:
    if not credentials_value:
        logger.info("Firebase credentials not configured; saved summaries are disabled.")
        return None
    return FirebaseService(initialize_firestore(credentials_value))

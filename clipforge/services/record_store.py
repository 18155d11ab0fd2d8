"""
Record Store Service
SQLite-backed persistence for source videos, clips, social accounts and posts.
"""

import asyncio
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

import aiosqlite

from ..models.clip import Clip, ClipStatus
from ..models.post import Post, PostStatus
from ..models.social_account import StoredSocialAccount
from ..models.video import SourceVideo
from ..utils.exceptions import DuplicateSocialAccountError, DuplicateVideoError
from ..utils.logger import get_logger

logger = get_logger()

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS source_videos (
        id TEXT PRIMARY KEY,
        url TEXT NOT NULL UNIQUE,
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        duration INTEGER NOT NULL DEFAULT 0,
        thumbnail TEXT NOT NULL DEFAULT '',
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clips (
        id TEXT PRIMARY KEY,
        video_id TEXT NOT NULL REFERENCES source_videos(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        start_time REAL NOT NULL,
        end_time REAL NOT NULL,
        duration REAL NOT NULL,
        status TEXT NOT NULL,
        error_message TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS social_accounts (
        id TEXT PRIMARY KEY,
        platform TEXT NOT NULL,
        username TEXT NOT NULL,
        password TEXT NOT NULL DEFAULT '',
        user_id TEXT NOT NULL,
        is_connected INTEGER NOT NULL DEFAULT 1,
        last_used TEXT,
        created_at TEXT NOT NULL,
        UNIQUE (user_id, platform)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id TEXT PRIMARY KEY,
        clip_id TEXT NOT NULL REFERENCES clips(id) ON DELETE CASCADE,
        social_account_id TEXT NOT NULL REFERENCES social_accounts(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL,
        scheduled_at TEXT,
        platform_url TEXT,
        error_message TEXT,
        posted_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clips_video_id ON clips(video_id)",
    "CREATE INDEX IF NOT EXISTS idx_clips_user_id ON clips(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_posts_status ON posts(status, scheduled_at)",
)


def _now() -> str:
    return datetime.utcnow().isoformat()


def _placeholders(values: Iterable[Any]) -> str:
    return ", ".join("?" for _ in values)


class RecordStore:
    """Persistent storage for pipeline records."""

    def __init__(self, db_path: str):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    async def initialize(self):
        """Initialize database schema."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA synchronous=NORMAL")
                for statement in _SCHEMA:
                    await conn.execute(statement)
                await conn.commit()

            self._initialized = True
            logger.info(f"Record store initialized at {self.db_path}")

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        await self.initialize()
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA foreign_keys=ON")
            yield conn

    async def _fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        async with self._connect() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            await cursor.close()
        return [dict(row) for row in rows]

    async def _fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        rows = await self._fetch_all(query, params)
        return rows[0] if rows else None

    async def _execute(self, query: str, params: tuple = ()) -> int:
        """Run a write statement and return the affected row count."""
        async with self._write_lock:
            async with self._connect() as conn:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount

    async def _insert(self, table: str, data: Dict[str, Any]):
        columns = ", ".join(data)
        query = f"INSERT INTO {table} ({columns}) VALUES ({_placeholders(data)})"
        await self._execute(query, tuple(data.values()))

    @staticmethod
    def _scoped(query: str, params: tuple, user_id: Optional[str]):
        if user_id is None:
            return query, params
        return query + " AND user_id = ?", params + (user_id,)

    # =========================================================================
    # Source Videos
    # =========================================================================

    async def create_video(self, video: SourceVideo) -> SourceVideo:
        try:
            await self._insert("source_videos", video.model_dump(mode="json"))
        except sqlite3.IntegrityError as exc:
            raise DuplicateVideoError(video.url) from exc
        return video

    async def get_video(self, video_id: str, user_id: Optional[str] = None) -> Optional[SourceVideo]:
        query, params = self._scoped("SELECT * FROM source_videos WHERE id = ?", (video_id,), user_id)
        row = await self._fetch_one(query, params)
        return SourceVideo(**row) if row else None

    async def get_video_by_url(self, url: str) -> Optional[SourceVideo]:
        row = await self._fetch_one("SELECT * FROM source_videos WHERE url = ?", (url,))
        return SourceVideo(**row) if row else None

    async def list_videos(self, user_id: str) -> List[SourceVideo]:
        rows = await self._fetch_all(
            "SELECT * FROM source_videos WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        )
        return [SourceVideo(**row) for row in rows]

    async def delete_video(self, video_id: str) -> List[str]:
        """Delete a video; its clips and their posts cascade. Returns deleted clip ids."""
        clip_rows = await self._fetch_all("SELECT id FROM clips WHERE video_id = ?", (video_id,))
        await self._execute("DELETE FROM source_videos WHERE id = ?", (video_id,))
        return [row["id"] for row in clip_rows]

    # =========================================================================
    # Clips
    # =========================================================================

    async def create_clip(self, clip: Clip) -> Clip:
        await self._insert("clips", clip.model_dump(mode="json"))
        return clip

    async def get_clip(self, clip_id: str, user_id: Optional[str] = None) -> Optional[Clip]:
        query, params = self._scoped("SELECT * FROM clips WHERE id = ?", (clip_id,), user_id)
        row = await self._fetch_one(query, params)
        return Clip(**row) if row else None

    async def list_clips(self, user_id: str, video_id: Optional[str] = None) -> List[Clip]:
        query = "SELECT * FROM clips WHERE user_id = ?"
        params: tuple = (user_id,)
        if video_id:
            query += " AND video_id = ?"
            params += (video_id,)
        query += " ORDER BY created_at DESC"
        return [Clip(**row) for row in await self._fetch_all(query, params)]

    async def update_clip(self, clip: Clip) -> Clip:
        """Persist editable fields; duration is recomputed from the range."""
        clip.duration = clip.end_time - clip.start_time
        clip.updated_at = datetime.utcnow()
        await self._execute(
            """
            UPDATE clips SET
                title = ?, description = ?, start_time = ?, end_time = ?,
                duration = ?, status = ?, error_message = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                clip.title,
                clip.description,
                clip.start_time,
                clip.end_time,
                clip.duration,
                clip.status.value,
                clip.error_message,
                clip.updated_at.isoformat(),
                clip.id,
            ),
        )
        return clip

    async def set_clip_status(
        self,
        clip_id: str,
        status: ClipStatus,
        error_message: Optional[str] = None
    ) -> bool:
        """Write a clip's status; False when the clip no longer exists."""
        changed = await self._execute(
            "UPDATE clips SET status = ?, error_message = ?, updated_at = ? WHERE id = ?",
            (status.value, error_message, _now(), clip_id),
        )
        return changed == 1

    async def transition_clip(
        self,
        clip_id: str,
        from_statuses: Iterable[ClipStatus],
        to_status: ClipStatus
    ) -> bool:
        """Compare-and-set a clip's status; False when the clip was not in from_statuses."""
        expected = [status.value for status in from_statuses]
        changed = await self._execute(
            f"""
            UPDATE clips SET status = ?, error_message = NULL, updated_at = ?
            WHERE id = ? AND status IN ({_placeholders(expected)})
            """,
            (to_status.value, _now(), clip_id, *expected),
        )
        return changed == 1

    async def delete_clip(self, clip_id: str):
        await self._execute("DELETE FROM clips WHERE id = ?", (clip_id,))

    # =========================================================================
    # Social Accounts
    # =========================================================================

    async def create_social_account(self, account: StoredSocialAccount) -> StoredSocialAccount:
        try:
            await self._insert("social_accounts", account.model_dump(mode="json"))
        except sqlite3.IntegrityError as exc:
            raise DuplicateSocialAccountError(account.platform.value) from exc
        return account

    async def get_social_account(
        self,
        account_id: str,
        user_id: Optional[str] = None
    ) -> Optional[StoredSocialAccount]:
        query, params = self._scoped("SELECT * FROM social_accounts WHERE id = ?", (account_id,), user_id)
        row = await self._fetch_one(query, params)
        return StoredSocialAccount(**row) if row else None

    async def list_social_accounts(self, user_id: str) -> List[StoredSocialAccount]:
        rows = await self._fetch_all(
            "SELECT * FROM social_accounts WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        )
        return [StoredSocialAccount(**row) for row in rows]

    async def touch_social_account(self, account_id: str):
        """Record an upload attempt on the account."""
        await self._execute(
            "UPDATE social_accounts SET last_used = ? WHERE id = ?",
            (_now(), account_id),
        )

    async def delete_social_account(self, account_id: str):
        await self._execute("DELETE FROM social_accounts WHERE id = ?", (account_id,))

    # =========================================================================
    # Posts
    # =========================================================================

    async def create_post(self, post: Post) -> Post:
        await self._insert("posts", post.model_dump(mode="json"))
        return post

    async def get_post(self, post_id: str, user_id: Optional[str] = None) -> Optional[Post]:
        query, params = self._scoped("SELECT * FROM posts WHERE id = ?", (post_id,), user_id)
        row = await self._fetch_one(query, params)
        return Post(**row) if row else None

    async def list_posts(self, user_id: str, clip_id: Optional[str] = None) -> List[Post]:
        query = "SELECT * FROM posts WHERE user_id = ?"
        params: tuple = (user_id,)
        if clip_id:
            query += " AND clip_id = ?"
            params += (clip_id,)
        query += " ORDER BY created_at DESC"
        return [Post(**row) for row in await self._fetch_all(query, params)]

    async def list_due_posts(self, now: Optional[datetime] = None) -> List[Post]:
        """Scheduled posts whose publish time has passed, oldest first."""
        cutoff = (now or datetime.utcnow()).isoformat()
        rows = await self._fetch_all(
            """
            SELECT * FROM posts
            WHERE status = ? AND scheduled_at IS NOT NULL AND scheduled_at <= ?
            ORDER BY scheduled_at ASC
            """,
            (PostStatus.SCHEDULED.value, cutoff),
        )
        return [Post(**row) for row in rows]

    async def transition_post(
        self,
        post_id: str,
        from_statuses: Iterable[PostStatus],
        to_status: PostStatus
    ) -> bool:
        """Compare-and-set a post's status; False when the post was not in from_statuses."""
        expected = [status.value for status in from_statuses]
        changed = await self._execute(
            f"""
            UPDATE posts SET status = ?, updated_at = ?
            WHERE id = ? AND status IN ({_placeholders(expected)})
            """,
            (to_status.value, _now(), post_id, *expected),
        )
        return changed == 1

    async def record_post_result(
        self,
        post_id: str,
        status: PostStatus,
        platform_url: Optional[str] = None,
        error_message: Optional[str] = None,
        posted_at: Optional[datetime] = None
    ):
        await self._execute(
            """
            UPDATE posts SET
                status = ?, platform_url = ?, error_message = ?, posted_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                status.value,
                platform_url,
                error_message,
                posted_at.isoformat() if posted_at else None,
                _now(),
                post_id,
            ),
        )

    # =========================================================================
    # Recovery
    # =========================================================================

    async def fail_interrupted(self) -> Dict[str, int]:
        """Mark runs cut short by a restart as failed."""
        message = "Interrupted by server restart"
        clips = await self._execute(
            "UPDATE clips SET status = ?, error_message = ?, updated_at = ? WHERE status = ?",
            (ClipStatus.FAILED.value, message, _now(), ClipStatus.PROCESSING.value),
        )
        posts = await self._execute(
            "UPDATE posts SET status = ?, error_message = ?, updated_at = ? WHERE status = ?",
            (PostStatus.FAILED.value, message, _now(), PostStatus.POSTING.value),
        )
        return {"clips": clips, "posts": posts}

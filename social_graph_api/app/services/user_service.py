"""
Business logic for users and friendships.

``UserService`` works against the SQLite connection it is constructed
with.  Friendships are stored once per unordered pair with the smaller
id in ``user1_id``; the primary key on the pair turns a reciprocal
insert into a uniqueness violation, which is reported as a conflict.

Popularity is never stored.  It is recomputed on every read from the
current friend set::

    score(u) = len(friends(u)) + 0.5 * shared hobby occurrences

where every hobby in a friend's list that also appears in ``u``'s list
counts once, so a friend listing two of ``u``'s hobbies adds 1.0.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from social_graph_api.app.schemas.user import UserCreate, UserRead, UserUpdate
from social_graph_api.app.services.errors import (
    DuplicateUsernameError,
    FriendshipExistsError,
    HobbyExistsError,
    InvalidInputError,
    SelfFriendshipError,
    UserHasFriendshipsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

SHARED_HOBBY_WEIGHT = 0.5


def canonical_pair(user_id1: str, user_id2: str) -> Tuple[str, str]:
    """Return the pair ordered the way it is stored (smaller id first)."""
    return (user_id1, user_id2) if user_id1 < user_id2 else (user_id2, user_id1)


class UserService:
    """Service for users, friendships and popularity scores."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_friends(self, user_id: str) -> List[str]:
        """Return the ids of all friends of ``user_id``."""
        rows = self.conn.execute(
            "SELECT user1_id, user2_id FROM friendships WHERE user1_id = ? OR user2_id = ?",
            (user_id, user_id),
        ).fetchall()
        return [row["user2_id"] if row["user1_id"] == user_id else row["user1_id"] for row in rows]

    def _get_raw_user(self, user_id: str) -> Optional[sqlite3.Row]:
        return self.conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    def compute_popularity(self, user_id: str) -> float:
        """Return the popularity score of ``user_id``, or 0 for unknown users."""
        row = self._get_raw_user(user_id)
        if row is None:
            return 0
        friends = self.get_friends(user_id)
        user_hobbies = set(json.loads(row["hobbies"]))

        shared = 0
        for friend_id in friends:
            friend_row = self._get_raw_user(friend_id)
            if friend_row is None:
                continue
            for hobby in json.loads(friend_row["hobbies"]):
                if hobby in user_hobbies:
                    shared += 1

        return len(friends) + shared * SHARED_HOBBY_WEIGHT

    def get_user(self, user_id: str) -> Optional[UserRead]:
        """Retrieve a user by ID, or ``None`` if it does not exist."""
        row = self._get_raw_user(user_id)
        if row is None:
            return None
        return self._row_to_user_read(row)

    def list_users(self) -> List[UserRead]:
        """Return every user with friends and popularity filled in."""
        rows = self.conn.execute("SELECT * FROM users ORDER BY created_at, id").fetchall()
        return [self._row_to_user_read(row) for row in rows]

    # ------------------------------------------------------------------
    # User mutations
    # ------------------------------------------------------------------

    def create_user(self, data: UserCreate) -> UserRead:
        """Insert a new user and return it.

        Raises ``DuplicateUsernameError`` if the username is taken.
        """
        user_id = str(uuid.uuid4())
        created_at = datetime.now(timezone.utc).isoformat()
        try:
            self.conn.execute(
                "INSERT INTO users (id, username, age, hobbies, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, data.username, data.age, json.dumps(data.hobbies), created_at),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            if _is_username_violation(exc):
                logger.warning("Username %s already exists", data.username)
                raise DuplicateUsernameError() from exc
            raise
        logger.info("Created user %s (%s)", user_id, data.username)
        return self.get_user(user_id)

    def update_user(self, user_id: str, data: UserUpdate) -> UserRead:
        """Apply the provided fields of ``data`` to the user.

        Fields left unset (or null) keep their stored value.  Raises
        ``UserNotFoundError`` for unknown ids and
        ``DuplicateUsernameError`` if the new username is taken.
        """
        if self._get_raw_user(user_id) is None:
            raise UserNotFoundError()

        updates: Dict[str, Any] = {
            key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None
        }
        if not updates:
            return self.get_user(user_id)
        if "hobbies" in updates:
            updates["hobbies"] = json.dumps(updates["hobbies"])

        fields = ", ".join(f"{key} = ?" for key in updates)
        try:
            self.conn.execute(
                f"UPDATE users SET {fields} WHERE id = ?",
                (*updates.values(), user_id),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            if _is_username_violation(exc):
                logger.warning("Username %s already exists", updates.get("username"))
                raise DuplicateUsernameError() from exc
            raise
        logger.info("Updated user %s: %s", user_id, ", ".join(updates))
        return self.get_user(user_id)

    def add_hobby(self, user_id: str, hobby: str) -> UserRead:
        """Append ``hobby`` to the user's hobby list.

        Raises ``InvalidInputError`` for an empty or blank hobby and
        ``HobbyExistsError`` if the user already lists it.
        """
        if not hobby or not hobby.strip():
            raise InvalidInputError("hobby must not be blank")
        row = self._get_raw_user(user_id)
        if row is None:
            raise UserNotFoundError()
        hobbies = json.loads(row["hobbies"])
        if hobby in hobbies:
            raise HobbyExistsError()
        return self.update_user(user_id, UserUpdate(hobbies=hobbies + [hobby]))

    def delete_user(self, user_id: str) -> None:
        """Delete a user that has no friendships.

        Raises ``UserHasFriendshipsError`` while any friendship exists;
        the caller must unlink first.  Raises ``UserNotFoundError`` if
        no row was deleted.
        """
        if self.get_friends(user_id):
            logger.warning("Refusing to delete user %s with friendships", user_id)
            raise UserHasFriendshipsError()
        cursor = self.conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        self.conn.commit()
        if cursor.rowcount == 0:
            raise UserNotFoundError()
        logger.info("Deleted user %s", user_id)

    # ------------------------------------------------------------------
    # Friendships
    # ------------------------------------------------------------------

    def create_friendship(self, user_id1: str, user_id2: str) -> None:
        """Link two users.

        Raises ``SelfFriendshipError`` when both ids are equal,
        ``UserNotFoundError`` if either user is missing and
        ``FriendshipExistsError`` if the pair is already linked in
        either direction.
        """
        if user_id1 == user_id2:
            raise SelfFriendshipError()
        if self._get_raw_user(user_id1) is None or self._get_raw_user(user_id2) is None:
            raise UserNotFoundError("One or both users not found")

        smaller_id, larger_id = canonical_pair(user_id1, user_id2)
        try:
            self.conn.execute(
                "INSERT INTO friendships (user1_id, user2_id) VALUES (?, ?)",
                (smaller_id, larger_id),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            if "UNIQUE constraint failed" in str(exc):
                logger.warning("Friendship %s-%s already exists", smaller_id, larger_id)
                raise FriendshipExistsError() from exc
            raise
        logger.info("Linked %s and %s", smaller_id, larger_id)

    def remove_friendship(self, user_id1: str, user_id2: str) -> bool:
        """Unlink two users; return whether a friendship was removed."""
        smaller_id, larger_id = canonical_pair(user_id1, user_id2)
        cursor = self.conn.execute(
            "DELETE FROM friendships WHERE user1_id = ? AND user2_id = ?",
            (smaller_id, larger_id),
        )
        self.conn.commit()
        removed = cursor.rowcount > 0
        if removed:
            logger.info("Unlinked %s and %s", smaller_id, larger_id)
        return removed

    def _row_to_user_read(self, row: sqlite3.Row) -> UserRead:
        """Convert a database row to a ``UserRead`` with derived fields."""
        return UserRead(
            id=row["id"],
            username=row["username"],
            age=row["age"],
            hobbies=json.loads(row["hobbies"]),
            friends=self.get_friends(row["id"]),
            created_at=row["created_at"],
            popularity_score=self.compute_popularity(row["id"]),
        )


def _is_username_violation(exc: sqlite3.IntegrityError) -> bool:
    return "users.username" in str(exc)

"""Domain-level exceptions for users and friendships."""

from __future__ import annotations


class SocialGraphError(Exception):
    """Base class for service errors."""

    reason: str = "unknown"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class InvalidInputError(SocialGraphError):
    reason = "Invalid input"


class ConflictError(SocialGraphError):
    reason = "Conflict"


class DuplicateUsernameError(ConflictError):
    reason = "Username already exists"


class SelfFriendshipError(ConflictError):
    reason = "Cannot create friendship with self"


class FriendshipExistsError(ConflictError):
    reason = "Friendship already exists"


class UserHasFriendshipsError(ConflictError):
    reason = "Cannot delete user with existing friendships. Remove friendships first."


class HobbyExistsError(ConflictError):
    reason = "User already has this hobby"


class NotFoundError(SocialGraphError):
    reason = "Not found"


class UserNotFoundError(NotFoundError):
    reason = "User not found"


class FriendshipNotFoundError(NotFoundError):
    reason = "Friendship not found"

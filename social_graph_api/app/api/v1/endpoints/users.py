"""
User endpoints for API v1.

CRUD for users plus the friendship link/unlink actions and the hobby
drop target used by the graph UI.  Every handler delegates to
``UserService`` and maps its typed errors to HTTP status codes.
Handlers are plain functions so FastAPI runs the blocking SQLite calls
in its threadpool.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from social_graph_api.app.api.deps import get_user_service
from social_graph_api.app.api.errors import map_error
from social_graph_api.app.schemas.user import (
    FriendshipRequest,
    HobbyRequest,
    UserCreate,
    UserRead,
    UserUpdate,
)
from social_graph_api.app.services.errors import FriendshipNotFoundError, SocialGraphError, UserNotFoundError
from social_graph_api.app.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=List[UserRead])
def list_users(service: UserService = Depends(get_user_service)) -> List[UserRead]:
    """Return all users with their friends and popularity scores."""
    return service.list_users()


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, service: UserService = Depends(get_user_service)) -> UserRead:
    """Retrieve a single user by ID.  Returns 404 if it does not exist."""
    user = service.get_user(user_id)
    if user is None:
        raise map_error(UserNotFoundError())
    return user


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, service: UserService = Depends(get_user_service)) -> UserRead:
    """Create a user.  A taken username yields 409."""
    try:
        return service.create_user(user)
    except SocialGraphError as exc:
        raise map_error(exc) from None


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Update any of ``username``, ``age`` and ``hobbies``.

    Fields missing from the body are left untouched.
    """
    try:
        return service.update_user(user_id, body)
    except SocialGraphError as exc:
        raise map_error(exc) from None


@router.delete("/{user_id}")
def delete_user(user_id: str, service: UserService = Depends(get_user_service)) -> dict:
    """Delete a user.

    Users that still have friendships cannot be deleted (409); unlink
    them first.
    """
    try:
        service.delete_user(user_id)
    except SocialGraphError as exc:
        raise map_error(exc) from None
    return {"message": "User deleted successfully"}


@router.post("/{user_id}/link", response_model=UserRead)
def link_users(
    user_id: str,
    payload: FriendshipRequest,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Create a friendship between ``user_id`` and ``friendId``."""
    if not payload.friend_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="friendId is required")
    try:
        service.create_friendship(user_id, payload.friend_id)
    except SocialGraphError as exc:
        raise map_error(exc) from None
    return service.get_user(user_id)


@router.delete("/{user_id}/unlink", response_model=UserRead)
def unlink_users(
    user_id: str,
    payload: FriendshipRequest,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Remove the friendship between ``user_id`` and ``friendId``."""
    if not payload.friend_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="friendId is required")
    if not service.remove_friendship(user_id, payload.friend_id):
        raise map_error(FriendshipNotFoundError())
    return service.get_user(user_id)


@router.post("/{user_id}/hobbies", response_model=UserRead)
def add_hobby(
    user_id: str,
    payload: HobbyRequest,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Append a hobby dropped onto a user node in the UI."""
    if not payload.hobby:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="hobby is required")
    try:
        return service.add_hobby(user_id, payload.hobby)
    except SocialGraphError as exc:
        raise map_error(exc) from None

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path

from src.api.db.store import Store
from src.api.schemas.common import ErrorResponse
from src.api.schemas.users import UserOut, UserUpsert
from src.api.services import users_service
from src.api.state import get_store

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserOut],
    summary="List users",
    operation_id="list_users",
)
def list_users(store: Store = Depends(get_store)) -> List[dict]:
    """List all users."""
    return users_service.list_users(store)


@router.post(
    "",
    response_model=UserOut,
    responses={400: {"model": ErrorResponse}},
    summary="Upsert user",
    description="Create a user, or update name/role/siteId of an existing one. Acknowledgement flags are kept.",
    operation_id="upsert_user",
)
def upsert_user(payload: UserUpsert, store: Store = Depends(get_store)) -> dict:
    """Create or update a user."""
    return users_service.upsert_user(store, payload)


@router.get(
    "/{user_id}",
    response_model=UserOut,
    responses={404: {"model": ErrorResponse}},
    summary="Get user",
    operation_id="get_user",
)
def get_user(user_id: str = Path(..., description="User identifier"), store: Store = Depends(get_store)) -> dict:
    """Fetch a user by id."""
    return users_service.get_user_by_id(store, user_id)

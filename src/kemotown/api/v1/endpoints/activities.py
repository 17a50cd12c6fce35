# src/kemotown/api/v1/endpoints/activities.py
"""Activity endpoints: notes, likes, reposts, follows and timelines."""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import datetime
from typing import TypeVar

from fastapi import APIRouter, HTTPException, Query, status

from kemotown.models import Activity
from kemotown.schemas.activity import (
    ActivityResponse,
    AddressingPreviewRequest,
    AnnounceCreate,
    DeliveryPreviewResponse,
    NoteCreate,
)
from kemotown.services import (
    ActivityConflictError,
    ActivityNotFoundError,
    ActivityPermissionError,
)

from ..dependencies import ActivityServiceDep, CurrentUserDep, OptionalUserDep, SessionDep

router = APIRouter(prefix="/activities", tags=["activities"])

T = TypeVar("T")


async def _run(action: Awaitable[T]) -> T:
    """Await a service call, translating service errors to HTTP errors."""
    try:
        return await action
    except ActivityNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except ActivityPermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    except ActivityConflictError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err


@router.get("/timeline/public", response_model=list[ActivityResponse])
async def public_timeline(
    service: ActivityServiceDep,
    limit: int = Query(20, ge=1, le=100, description="Maximum number of activities to return"),
    before: datetime | None = Query(None, description="Return activities published before this time"),
) -> list[Activity]:
    """List the newest public activities."""
    return await service.public_timeline(limit, before)


@router.get("/timeline/home", response_model=list[ActivityResponse])
async def home_timeline(
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    limit: int = Query(20, ge=1, le=100, description="Maximum number of activities to return"),
    before: datetime | None = Query(None, description="Return activities published before this time"),
) -> list[Activity]:
    """List the newest activities the current user may see."""
    return await service.home_timeline(current_user.id, limit, before)


@router.post("/preview", response_model=DeliveryPreviewResponse)
async def preview_delivery(
    payload: AddressingPreviewRequest,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
) -> DeliveryPreviewResponse:
    """Show who an activity with the given addressing would reach."""
    preview = await service.preview(current_user.id, payload.to, payload.cc)
    return DeliveryPreviewResponse.model_validate(preview)


@router.post("/notes", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    db: SessionDep,
) -> Activity:
    """Create a note and deliver it to its addressees and mentioned users."""
    activity = await _run(service.create_note(current_user.id, payload))
    db.commit()
    return activity


@router.post("/follow/{user_id}", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: str,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    db: SessionDep,
) -> Activity:
    """Follow another user."""
    activity = await _run(service.follow(current_user.id, user_id))
    db.commit()
    return activity


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: str,
    viewer: OptionalUserDep,
    service: ActivityServiceDep,
) -> Activity:
    """Return one activity; hidden activities are reported as missing."""
    activity = await service.get_activity(activity_id, viewer.id if viewer else None)
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity


@router.post("/{activity_id}/like", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def like_activity(
    activity_id: str,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    db: SessionDep,
) -> Activity:
    """Like an activity visible to the current user."""
    activity = await _run(service.create_like(current_user.id, activity_id))
    db.commit()
    return activity


@router.post(
    "/{activity_id}/announce",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
async def announce_activity(
    activity_id: str,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    db: SessionDep,
    payload: AnnounceCreate | None = None,
) -> Activity:
    """Repost a public activity."""
    activity = await _run(service.create_announce(current_user.id, activity_id, payload))
    db.commit()
    return activity


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    activity_id: str,
    current_user: CurrentUserDep,
    service: ActivityServiceDep,
    db: SessionDep,
) -> None:
    """Delete one of the current user's activities and its deliveries."""
    await _run(service.delete_activity(current_user.id, activity_id))
    db.commit()

# src/kemotown/api/v1/endpoints/inbox.py
"""Inbox (notification) endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from kemotown.schemas.inbox import (
    CategoryFilter,
    InboxItemResponse,
    InboxPage,
    MarkAllReadRequest,
    MarkReadRequest,
    UnreadCounts,
    get_category_filter,
)

from ..dependencies import ActivityServiceDep, CurrentUserDep, InboxServiceDep, SessionDep

router = APIRouter(prefix="/inbox", tags=["inbox"])


@router.get("", response_model=InboxPage)
async def list_notifications(
    current_user: CurrentUserDep,
    service: InboxServiceDep,
    category: CategoryFilter = Query("all", description="Notification category filter"),
    unread_only: bool = Query(False, description="Only return unread notifications"),
    cursor: str | None = Query(None, description="Id of the last item of the previous page"),
    limit: int = Query(20, ge=1, le=50, description="Maximum number of items to return"),
) -> InboxPage:
    """List the current user's notifications, newest first."""
    items, next_cursor = service.list_notifications(
        current_user.id,
        category=category,
        unread_only=unread_only,
        cursor=cursor,
        limit=limit,
    )
    return InboxPage(
        items=[InboxItemResponse.model_validate(item) for item in items],
        next_cursor=next_cursor,
    )


@router.get("/unread-counts", response_model=UnreadCounts)
async def unread_counts(current_user: CurrentUserDep, service: InboxServiceDep) -> UnreadCounts:
    """Return unread notification counts by category."""
    return service.unread_counts(current_user.id)


@router.post("/read")
async def mark_items_read(
    payload: MarkReadRequest,
    current_user: CurrentUserDep,
    service: InboxServiceDep,
    db: SessionDep,
) -> dict[str, int]:
    """Mark specific notifications as read."""
    updated = service.mark_items_read(current_user.id, payload.ids)
    db.commit()
    return {"updated": updated}


@router.post("/read-all")
async def mark_all_read(
    current_user: CurrentUserDep,
    activities: ActivityServiceDep,
    db: SessionDep,
    payload: MarkAllReadRequest | None = None,
) -> dict[str, int]:
    """Mark every notification as read, optionally within one category filter."""
    categories = get_category_filter(payload.category) if payload and payload.category else None
    updated = activities.delivery.mark_all_read(current_user.id, categories)
    db.commit()
    return {"updated": updated}


@router.post("/{activity_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_activity_read(
    activity_id: str,
    current_user: CurrentUserDep,
    activities: ActivityServiceDep,
    db: SessionDep,
) -> None:
    """Mark the current user's delivery of one activity as read."""
    if not activities.delivery.mark_read(activity_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inbox item not found")
    db.commit()

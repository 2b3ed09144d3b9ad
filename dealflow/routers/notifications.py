"""Notification endpoints for the acting user."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dealflow.core.deps import get_current_user_id, get_db
from dealflow.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
)
from dealflow.services import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    items = notification_service.get_notifications(
        db, user_id, unread_only=unread_only, limit=limit, offset=offset
    )
    return NotificationListResponse(
        items=[NotificationRead.model_validate(n) for n in items],
        unread_count=notification_service.get_unread_count(db, user_id),
    )


@router.get("/settings", response_model=NotificationPreferencesRead)
def get_settings(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return notification_service.get_preferences(db, user_id)


@router.patch("/settings", response_model=NotificationPreferencesRead)
def update_settings(
    data: NotificationPreferencesUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return notification_service.update_preferences(
        db, user_id, data.model_dump(exclude_none=True)
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return MarkAllReadResponse(marked=notification_service.mark_all_read(db, user_id))


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    notification = notification_service.mark_read(db, notification_id, user_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification

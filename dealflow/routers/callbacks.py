"""Scheduled callback endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from dealflow.core.deps import get_current_user_id, get_db
from dealflow.db.enums import CallbackStatus
from dealflow.schemas.callback import CallbackCreate, CallbackRead, CallbackStatusUpdate
from dealflow.services import callback_service

router = APIRouter()


@router.post("", response_model=CallbackRead, status_code=201)
def schedule_callback(
    data: CallbackCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        return callback_service.schedule_callback(db, scheduled_by=user_id, data=data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[CallbackRead])
def list_my_callbacks(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Upcoming pending callbacks for the acting user."""
    return callback_service.list_upcoming_callbacks(db, user_id)


@router.patch("/{callback_id}/status", response_model=CallbackRead)
def update_callback_status(
    callback_id: UUID,
    data: CallbackStatusUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    callback = callback_service.get_callback(db, callback_id)
    if not callback or user_id not in (callback.scheduled_by, callback.scheduled_with):
        raise HTTPException(status_code=404, detail="Callback not found")
    try:
        return callback_service.update_callback_status(db, callback, CallbackStatus(data.status))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

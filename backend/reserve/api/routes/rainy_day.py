"""
Rainy day routes: logs, feedback and the session rounds.

Session state travels with every request and response; the server keeps
none of it.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from reserve.db.session import get_db
from reserve.models.user import User
from reserve.schemas.deposit import DepositResponse
from reserve.schemas.rainy_day import (
    FeedbackUpdate, RainyDayLogCreate, RainyDayLogResponse, SessionNextRequest,
    SessionRateRequest, SessionStartRequest, SessionState, SessionStepResponse
)
from reserve.api.dependencies import get_current_user
from reserve.services import rainy_day_service
from reserve.services.rainy_day_service import RainyDaySession, SessionStep

router = APIRouter(tags=["rainy-day"])


def _to_session(state: SessionState) -> RainyDaySession:
    return RainyDaySession(
        target=state.target,
        shown=state.shown,
        thumbs_up=state.thumbs_up,
        exclude_ids=state.exclude_ids
    )


def _step_response(step: SessionStep) -> SessionStepResponse:
    return SessionStepResponse(
        state=step.outcome,
        session=SessionState(**step.session.to_dict()),
        deposit=DepositResponse.model_validate(step.deposit) if step.deposit else None,
        log_id=step.log.id if step.log else None
    )


@router.post("/rainy-day-logs", response_model=RainyDayLogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(
    payload: RainyDayLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Log a rainy day round (depositId is null when nothing was surfaced)."""
    return rainy_day_service.create_log(current_user.id, payload.emotion, payload.deposit_id, db)


@router.get("/rainy-day-logs", response_model=List[RainyDayLogResponse])
async def list_logs(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all rainy day logs, newest first."""
    return rainy_day_service.list_logs(current_user.id, db)


@router.patch("/rainy-day-logs/{log_id}/feedback", response_model=RainyDayLogResponse)
async def update_feedback(
    log_id: str,
    payload: FeedbackUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a rating (2, 1 or -1) and/or a feedback note."""
    return rainy_day_service.record_feedback(
        log_id, current_user.id, payload.model_dump(exclude_unset=True), db
    )


@router.post("/rainy-day/start", response_model=SessionStepResponse)
async def start_session(
    payload: SessionStartRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Start a session: surface the first deposit or report an empty reserve."""
    step = rainy_day_service.start_session(current_user.id, payload.emotion, payload.target, db)
    return _step_response(step)


@router.post("/rainy-day/rate", response_model=SessionStepResponse)
async def rate_round(
    payload: SessionRateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rate the current deposit; reports whether the session is complete."""
    step = rainy_day_service.rate_round(
        current_user.id,
        _to_session(payload.session),
        payload.log_id,
        payload.rating,
        payload.feedback_note,
        db
    )
    return _step_response(step)


@router.post("/rainy-day/next", response_model=SessionStepResponse)
async def next_round(
    payload: SessionNextRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Surface the next deposit, skipping every one shown in this session."""
    step = rainy_day_service.advance_session(
        current_user.id, payload.emotion, _to_session(payload.session), db
    )
    return _step_response(step)

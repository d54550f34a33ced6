from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import catalog_dep, session_repo_dep
from app.domain.models.session import BehaviorEvent, SessionProfile
from app.domain.repositories.session_repo import SessionRepo

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions"])


@router.post("/sessions", response_model=SessionProfile, status_code=201)
async def create_session(repo: SessionRepo = Depends(session_repo_dep)):
    return await repo.create_profile()


@router.get("/sessions/{session_id}", response_model=SessionProfile)
async def get_session(session_id: str, repo: SessionRepo = Depends(session_repo_dep)):
    profile = await repo.get_profile(session_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return profile


@router.delete("/sessions/{session_id}", response_model=SessionProfile)
async def reset_session(session_id: str, repo: SessionRepo = Depends(session_repo_dep)):
    """Forget everything learned in this session (the cart is kept)."""
    profile = await repo.reset_profile(session_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return profile


@router.post("/sessions/{session_id}/events", response_model=SessionProfile)
async def track_session_event(
    session_id: str,
    event: BehaviorEvent,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog = Depends(catalog_dep),
):
    """
    Record one behavioral event (view, add-to-cart, remove-from-cart, search, chat).
    Events on one session are applied in arrival order under a session lock.
    """
    logger.info(f"Request: track_event session_id={session_id} type={event.type} product_id={event.product_id}")
    profile = await repo.track(session_id, event, catalog)
    if profile is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return profile

# routers/game.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from answers import AnswerRequired
from config import DEFAULT_LANGUAGE, NEXT_QUESTION_DELAY_MS
from narration import Language
from schemas.game import (
    AnswerRequest,
    AnswerResponse,
    CreateSessionRequest,
    FeedbackOut,
    LanguageRequest,
    QuestionOut,
    SelectDifficultyRequest,
    SessionOut,
)
from sessions import GameSession, SessionError, SessionNotFound, SessionStore, get_store

logger = logging.getLogger("timestables.api")

router = APIRouter(prefix="/sessions", tags=["game"])

# Handlers are async and never await mid-transition, so each session sees one
# event at a time on the event loop.


def _snapshot(session: GameSession) -> SessionOut:
    engine = session.engine
    question = None
    feedback = FeedbackOut()
    narration = None
    token = 0

    if engine is not None:
        q = engine.current_question
        if q is not None:
            question = QuestionOut(
                num1=q.num1,
                num2=q.num2,
                options=list(q.options),
                answer=q.answer if session.answered else None,
            )
        if session.answered and session.last_evaluation and not session.last_evaluation.correct:
            feedback = FeedbackOut(incorrect_selection=engine.feedback)
        narration = engine.narration.current()
        token = engine.narration.token

    state = engine.state if engine else None
    return SessionOut(
        id=session.id,
        phase=session.phase,
        language=session.language,
        tier=session.tier,
        score=session.score,
        correct_streak=state.correct_streak if state else 0,
        wrong_streak=state.wrong_streak if state else 0,
        difficulty_level=state.difficulty_level if state else 0,
        question=question,
        answered=session.answered,
        feedback=feedback,
        input_mode=session.input_mode,
        narration=narration,
        narration_token=token,
        next_question_delay_ms=NEXT_QUESTION_DELAY_MS,
    )


def _load(store: SessionStore, session_id: str) -> GameSession:
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="session not found")


def _conflict(e: SessionError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@router.post("", response_model=SessionOut, status_code=201)
async def create_session(req: CreateSessionRequest, store: SessionStore = Depends(get_store)):
    try:
        language = req.language or Language(DEFAULT_LANGUAGE)
    except ValueError:
        logger.warning("DEFAULT_LANGUAGE=%r is not supported, using English", DEFAULT_LANGUAGE)
        language = Language.ENGLISH
    session = store.create(language=language, seed=req.seed)
    return _snapshot(session)


@router.get("/{session_id}", response_model=SessionOut)
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    return _snapshot(_load(store, session_id))


@router.delete("/{session_id}")
async def abandon_session(session_id: str, store: SessionStore = Depends(get_store)):
    try:
        store.discard(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="session not found")
    return {"ok": True}


@router.post("/{session_id}/difficulty", response_model=SessionOut)
async def select_difficulty(
    session_id: str, req: SelectDifficultyRequest, store: SessionStore = Depends(get_store)
):
    session = _load(store, session_id)
    try:
        session.select_difficulty(req.tier)
    except SessionError as e:
        raise _conflict(e)
    return _snapshot(session)


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(
    session_id: str, req: AnswerRequest, store: SessionStore = Depends(get_store)
):
    session = _load(store, session_id)
    try:
        result = session.submit_answer(req.value)
    except AnswerRequired as e:
        return AnswerResponse(ok=False, feedback=str(e), score=session.score, session=_snapshot(session))
    except SessionError as e:
        raise _conflict(e)

    q = session.question
    return AnswerResponse(
        ok=True,
        correct=result.correct,
        delta=result.delta,
        score=result.score,
        won=result.won,
        feedback=None if result.correct else f"{q.num1} x {q.num2} = {q.answer}",
        compliment=result.compliment,
        session=_snapshot(session),
    )


@router.post("/{session_id}/next", response_model=SessionOut)
async def next_question(session_id: str, store: SessionStore = Depends(get_store)):
    session = _load(store, session_id)
    try:
        session.advance()
    except SessionError as e:
        raise _conflict(e)
    return _snapshot(session)


@router.post("/{session_id}/reset", response_model=SessionOut)
async def reset_session(session_id: str, store: SessionStore = Depends(get_store)):
    session = _load(store, session_id)
    session.reset()
    return _snapshot(session)


@router.put("/{session_id}/language", response_model=SessionOut)
async def set_language(
    session_id: str, req: LanguageRequest, store: SessionStore = Depends(get_store)
):
    session = _load(store, session_id)
    session.set_language(req.language)
    return _snapshot(session)

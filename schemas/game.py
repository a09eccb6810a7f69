# schemas/game.py
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel

from engine import Difficulty
from narration import Language, NarrationRequest
from sessions import GamePhase

# ---------- Requests ----------


class CreateSessionRequest(BaseModel):
    language: Optional[Language] = None
    # fixes the random draws of this session (reproducible play)
    seed: Optional[int] = None


class SelectDifficultyRequest(BaseModel):
    tier: Difficulty


class AnswerRequest(BaseModel):
    # an option value, or free text in typed mode
    value: Union[int, str]


class LanguageRequest(BaseModel):
    language: Language


# ---------- Session snapshot ----------


class QuestionOut(BaseModel):
    num1: int
    num2: int
    options: List[int]
    # only revealed once the question has been answered
    answer: Optional[int] = None


class FeedbackOut(BaseModel):
    incorrect_selection: Optional[int] = None


class SessionOut(BaseModel):
    id: str
    phase: GamePhase
    language: Language
    tier: Optional[Difficulty] = None
    score: int
    correct_streak: int = 0
    wrong_streak: int = 0
    difficulty_level: int = 0
    question: Optional[QuestionOut] = None
    answered: bool = False
    feedback: FeedbackOut = FeedbackOut()
    input_mode: str
    narration: Optional[NarrationRequest] = None
    narration_token: int = 0
    next_question_delay_ms: int


# ---------- Answer ----------


class AnswerResponse(BaseModel):
    ok: bool
    correct: bool = False
    delta: int = 0
    score: int = 0
    won: bool = False
    feedback: Optional[str] = None
    compliment: Optional[str] = None
    session: Optional[SessionOut] = None

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("timestables.narration")


class Language(str, Enum):
    ENGLISH = "English"
    HEBREW = "Hebrew"
    RUSSIAN = "Russian"


LOCALES: Dict[Language, str] = {
    Language.ENGLISH: "en-US",
    Language.HEBREW: "he-IL",
    Language.RUSSIAN: "ru-RU",
}

_QUESTION_TEMPLATES: Dict[Language, str] = {
    Language.ENGLISH: "{num1} times {num2}",
    Language.HEBREW: "{num1} כפול {num2}",
    Language.RUSSIAN: "{num1} умножить на {num2}",
}

COMPLIMENTS: List[str] = [
    "Good!",
    "Excellent!",
    "Great job!",
    "You are doing well!",
    "You are amazing!",
]
HIGH_SCORE_COMPLIMENTS: List[str] = [
    "You are almost there!",
    "Keep up the good work!",
    "You are going to win soon!",
    "You are so smart!",
]
NEAR_WIN_SCORE = 950

# Compliments are always voiced in English, whatever the game language.
COMPLIMENT_LANGUAGE = Language.ENGLISH


class NarrationKind(str, Enum):
    QUESTION = "question"
    COMPLIMENT = "compliment"


class NarrationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    language: Language
    locale: str
    kind: NarrationKind
    token: int


class Narrator(Protocol):
    def speak(self, request: NarrationRequest) -> None: ...


class LoggingNarrator:
    """Default collaborator: no audio, just a log line per request."""

    def speak(self, request: NarrationRequest) -> None:
        logger.debug("narrate[%s #%s] %s: %s", request.kind.value, request.token, request.locale, request.text)


def question_text(num1: int, num2: int, language: Language) -> str:
    template = _QUESTION_TEMPLATES.get(language, _QUESTION_TEMPLATES[Language.ENGLISH])
    return template.format(num1=num1, num2=num2)


def pick_compliment(score: int, rng: Optional[random.Random] = None) -> str:
    """Near-win players hear the high-score pool; ``score`` is the score before the answer."""
    rng = rng or random.Random()
    pool = HIGH_SCORE_COMPLIMENTS if score >= NEAR_WIN_SCORE else COMPLIMENTS
    return rng.choice(pool)


class NarrationChannel:
    """
    Fire-and-forget hand-off to a narrator, tagged with a generation token.

    Every question narration starts a new generation. A question request stays
    current only while its generation is the latest and it has not been halted;
    a compliment may still finish one generation later.
    """

    def __init__(self, narrator: Optional[Narrator] = None):
        self.narrator = narrator or LoggingNarrator()
        self.token = 0
        self.halted = False
        self.latest: Optional[NarrationRequest] = None

    def announce_question(self, text: str, language: Language) -> NarrationRequest:
        self.token += 1
        self.halted = False
        return self._dispatch(text, language, NarrationKind.QUESTION)

    def announce_compliment(self, text: str, language: Language = COMPLIMENT_LANGUAGE) -> NarrationRequest:
        return self._dispatch(text, language, NarrationKind.COMPLIMENT)

    def halt(self) -> None:
        self.halted = True

    def is_current(self, request: NarrationRequest) -> bool:
        if request.kind is NarrationKind.QUESTION:
            return request.token == self.token and not self.halted
        return self.token - request.token <= 1

    def current(self) -> Optional[NarrationRequest]:
        if self.latest is not None and self.is_current(self.latest):
            return self.latest
        return None

    def _dispatch(self, text: str, language: Language, kind: NarrationKind) -> NarrationRequest:
        request = NarrationRequest(
            text=text,
            language=language,
            locale=LOCALES[language],
            kind=kind,
            token=self.token,
        )
        self.latest = request
        try:
            self.narrator.speak(request)
        except Exception:
            # Narration never blocks the game
            logger.warning("narration failed for %r", text, exc_info=True)
        return request

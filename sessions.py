from __future__ import annotations

import logging
import random
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Optional, Union

from answers import parse_answer
from config import MAX_SESSIONS, TYPED_INPUT_SCORE
from engine import Difficulty, DifficultyEngine, Evaluation, Question
from narration import Language, Narrator

logger = logging.getLogger("timestables.sessions")


class GamePhase(str, Enum):
    SELECTING_DIFFICULTY = "selecting_difficulty"
    PLAYING = "playing"
    WON = "won"


class SessionError(Exception):
    pass


class SessionNotFound(SessionError):
    pass


class InvalidPhase(SessionError):
    pass


class AlreadyAnswered(SessionError):
    pass


class NotAnswered(SessionError):
    pass


class GameSession:
    """
    One player's playthrough: selecting_difficulty -> playing -> won -> (reset).

    The engine never checks that a question is answered only once; this class does.
    """

    def __init__(
        self,
        session_id: str,
        language: Language = Language.ENGLISH,
        seed: Optional[int] = None,
        narrator: Optional[Narrator] = None,
    ):
        self.id = session_id
        self.language = language
        self.phase = GamePhase.SELECTING_DIFFICULTY
        self.rng = random.Random(seed)
        self.narrator = narrator
        self.engine: Optional[DifficultyEngine] = None
        self.answered = False
        self.last_evaluation: Optional[Evaluation] = None

    # --- read-only views ---

    @property
    def tier(self) -> Optional[Difficulty]:
        return self.engine.state.tier if self.engine else None

    @property
    def score(self) -> int:
        return self.engine.state.score if self.engine else 0

    @property
    def question(self) -> Optional[Question]:
        return self.engine.current_question if self.engine else None

    @property
    def input_mode(self) -> str:
        return "typed" if self.score >= TYPED_INPUT_SCORE else "choices"

    # --- transitions ---

    def _require(self, phase: GamePhase) -> None:
        if self.phase is not phase:
            raise InvalidPhase(f"session is {self.phase.value}, expected {phase.value}")

    def select_difficulty(self, tier: Difficulty) -> Question:
        self._require(GamePhase.SELECTING_DIFFICULTY)
        self.engine = DifficultyEngine(
            tier, language=self.language, rng=self.rng, narrator=self.narrator
        )
        self.phase = GamePhase.PLAYING
        self.answered = False
        self.last_evaluation = None
        logger.info("session %s started on %s", self.id, tier.value)
        return self.engine.generate_question()

    def submit_answer(self, value: Union[int, str]) -> Evaluation:
        self._require(GamePhase.PLAYING)
        if self.answered:
            raise AlreadyAnswered("this question has already been answered")

        # Blank input raises AnswerRequired before the question is consumed
        submitted = parse_answer(value)
        self.answered = True
        result = self.engine.evaluate_answer(self.engine.current_question, submitted)
        self.last_evaluation = result
        if result.won:
            self.phase = GamePhase.WON
            logger.info("session %s won with %s", self.id, result.score)
        return result

    def advance(self) -> Question:
        self._require(GamePhase.PLAYING)
        if not self.answered:
            raise NotAnswered("answer the current question first")
        self.answered = False
        self.last_evaluation = None
        return self.engine.generate_question()

    def reset(self) -> None:
        logger.info("session %s reset from %s (score %s)", self.id, self.phase.value, self.score)
        self.phase = GamePhase.SELECTING_DIFFICULTY
        self.engine = None
        self.answered = False
        self.last_evaluation = None

    def set_language(self, language: Language) -> None:
        self.language = language
        if self.engine:
            self.engine.language = language


class SessionStore:
    """In-memory sessions, oldest evicted first once ``max_sessions`` is reached."""

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        language: Language = Language.ENGLISH,
        seed: Optional[int] = None,
        narrator: Optional[Narrator] = None,
    ) -> GameSession:
        while len(self._sessions) >= self.max_sessions:
            old_id, _ = self._sessions.popitem(last=False)
            logger.warning("session cap %s reached, evicted %s", self.max_sessions, old_id)
        session = GameSession(uuid.uuid4().hex, language=language, seed=seed, narrator=narrator)
        self._sessions[session.id] = session
        logger.info("session %s created (%s)", session.id, language.value)
        return session

    def get(self, session_id: str) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("session %s abandoned", session_id)

    def purge(self) -> int:
        n = len(self._sessions)
        self._sessions.clear()
        return n


_store = SessionStore()


# Public API
def get_store() -> SessionStore:
    return _store

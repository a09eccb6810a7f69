from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from narration import Language, NarrationChannel, Narrator, pick_compliment, question_text

logger = logging.getLogger("timestables.engine")

# --- Progression policy ------------------------------------------------------------
WIN_SCORE = 1000
CORRECT_REWARD = 5
SCORE_OVERRIDE_THRESHOLD = 800  # tier-independent hard questions from here
NO_ONES_THRESHOLD = 100  # no "x 1" problems from here
FALLBACK_SCORE_BONUS_THRESHOLD = 500
FALLBACK_SCORE_BONUS = 2
INTRO_CORRECT_ANSWERS = 30  # Easy tier sticks to the 2 and 3 tables until then
STREAK_STEP = 3
WRONG_STREAK_STEP = 3
OPTION_COUNT = 4

HIGH_FACTORS = (6, 7, 8, 9)
MODERATE_FACTORS = (4, 5, 6, 7)
INTRO_FACTORS = (2, 3)
ONE_REPLACEMENTS = (2, 3, 4)

# Rejection loops are bounded; the operand ranges make a repeat unlikely.
MAX_DRAW_ATTEMPTS = 500
MAX_OPTION_ATTEMPTS = 500


class Difficulty(str, Enum):
    EASY = "Easy"
    MODERATE = "Moderate"
    HARD = "Hard"


INITIAL_LEVEL: Dict[Difficulty, int] = {
    Difficulty.EASY: 0,
    Difficulty.MODERATE: 2,
    Difficulty.HARD: 5,
}

BASE_SPAN: Dict[Difficulty, int] = {
    Difficulty.EASY: 4,
    Difficulty.MODERATE: 7,
    Difficulty.HARD: 10,
}


class GenerationError(RuntimeError):
    pass


# --- Models --------------------------------------------------------------------------


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    num1: int
    num2: int
    answer: int
    options: Tuple[int, ...]

    def pair(self) -> Tuple[int, int]:
        return _unordered(self.num1, self.num2)


class ProgressionState(BaseModel):
    tier: Difficulty
    score: int = 0
    difficulty_level: int = 0
    correct_streak: int = 0
    wrong_streak: int = 0
    correct_answers_count: int = 0
    last_question: Optional[Tuple[int, int]] = None

    @classmethod
    def for_tier(cls, tier: Difficulty, score: int = 0) -> "ProgressionState":
        return cls(tier=tier, score=score, difficulty_level=INITIAL_LEVEL[tier])


class Evaluation(BaseModel):
    correct: bool
    delta: int
    score: int
    penalty: int = 0
    # parsed value the player gave; None when the text was not a number
    submitted: Optional[int] = None
    won: bool = False
    level_dropped: bool = False
    compliment: Optional[str] = None


# --- Scoring -------------------------------------------------------------------------


def get_penalty(score: int) -> int:
    if score >= 930:
        return 8
    if score >= 800:
        return 5
    if score >= 700:
        return 4
    return 2


# --- Generation helpers --------------------------------------------------------------


def _unordered(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a <= b else (b, a)


def _maybe_swap(a: int, b: int, rng: random.Random) -> Tuple[int, int]:
    if rng.random() < 0.5:
        return b, a
    return a, b


def _pick_operands(state: ProgressionState, rng: random.Random) -> Tuple[int, int]:
    """
    Priority-ordered rule cascade; the first rule that applies picks the operands.
    """
    if state.score >= SCORE_OVERRIDE_THRESHOLD:
        return _maybe_swap(rng.choice(HIGH_FACTORS), rng.randint(6, 12), rng)

    if state.tier is Difficulty.HARD:
        return rng.choice(HIGH_FACTORS), rng.choice(HIGH_FACTORS)

    if state.tier is Difficulty.MODERATE:
        return _maybe_swap(rng.choice(MODERATE_FACTORS), rng.randint(1, 10), rng)

    if state.tier is Difficulty.EASY and state.correct_answers_count < INTRO_CORRECT_ANSWERS:
        return _maybe_swap(rng.choice(INTRO_FACTORS), rng.randint(1, 10), rng)

    # Dynamic progression for Easy once the introduction is over
    base = BASE_SPAN[state.tier]
    score_bonus = FALLBACK_SCORE_BONUS if state.score >= FALLBACK_SCORE_BONUS_THRESHOLD else 0
    effective = state.difficulty_level + state.correct_streak // STREAK_STEP + score_bonus
    num1 = rng.randint(1, base + effective)
    num2 = rng.randint(1, base + max(0, effective - 2))
    if num1 == 1 and num2 == 1:
        num2 = rng.randint(2, 10)
    return num1, num2


def _drop_ones(num1: int, num2: int, score: int, rng: random.Random) -> Tuple[int, int]:
    if score < NO_ONES_THRESHOLD:
        return num1, num2
    if num1 == 1:
        num1 = rng.choice(ONE_REPLACEMENTS)
    if num2 == 1:
        num2 = rng.choice(ONE_REPLACEMENTS)
    return num1, num2


def _build_options(num1: int, num2: int, rng: random.Random) -> Tuple[int, ...]:
    answer = num1 * num2
    options: List[int] = [answer]

    for _ in range(MAX_OPTION_ATTEMPTS):
        if len(options) == OPTION_COUNT:
            break
        offset = rng.randint(-5, 4)
        multiplier = num1 if rng.random() < 0.5 else num2
        candidate = answer + offset * multiplier
        if candidate == answer or candidate <= 0:
            size = len(options)
            sign = 1 if rng.random() < 0.5 else -1
            candidate = answer + size * sign * rng.randint(2, 4)
            if candidate <= 0 or candidate == answer:
                candidate = answer + size + 1
        if candidate not in options:
            options.append(candidate)

    if len(options) < OPTION_COUNT:
        raise GenerationError(f"could not build {OPTION_COUNT} options for {num1} x {num2}")

    rng.shuffle(options)
    return tuple(options)


# --- Core operations -----------------------------------------------------------------


def generate_question(state: ProgressionState, rng: Optional[random.Random] = None) -> Question:
    """
    Draw the next problem for ``state`` and remember its operand pair.

    The draw is repeated until the unordered pair differs from the previous one.
    """
    rng = rng or random.Random()

    for _ in range(MAX_DRAW_ATTEMPTS):
        num1, num2 = _pick_operands(state, rng)
        num1, num2 = _drop_ones(num1, num2, state.score, rng)
        if _unordered(num1, num2) != state.last_question:
            break
    else:
        raise GenerationError(
            f"no fresh operand pair after {MAX_DRAW_ATTEMPTS} draws (last={state.last_question})"
        )

    state.last_question = _unordered(num1, num2)
    return Question(
        num1=num1,
        num2=num2,
        answer=num1 * num2,
        options=_build_options(num1, num2, rng),
    )


def evaluate_answer(
    state: ProgressionState,
    question: Question,
    submitted: Optional[int],
    rng: Optional[random.Random] = None,
) -> Evaluation:
    """
    Score one answer. Callers must evaluate each question at most once.
    """
    rng = rng or random.Random()
    before = state.score
    compliment = None
    penalty = 0

    correct = submitted is not None and submitted == question.answer
    if correct:
        state.score += CORRECT_REWARD
        state.correct_streak += 1
        state.wrong_streak = 0
        state.correct_answers_count += 1
        compliment = pick_compliment(before, rng)
    else:
        penalty = get_penalty(before)
        state.score = max(0, before - penalty)
        state.correct_streak = 0
        state.wrong_streak += 1

    level_dropped = False
    if state.wrong_streak > 0 and state.wrong_streak % WRONG_STREAK_STEP == 0:
        level_dropped = state.difficulty_level > 0
        state.difficulty_level = max(0, state.difficulty_level - 1)

    return Evaluation(
        correct=correct,
        delta=state.score - before,
        score=state.score,
        penalty=penalty,
        submitted=submitted,
        won=before < WIN_SCORE <= state.score,
        level_dropped=level_dropped,
        compliment=compliment,
    )


# --- Engine --------------------------------------------------------------------------


class DifficultyEngine:
    """
    Owns the progression state of one playthrough and narrates what it produces.

    Nothing here is shared between sessions: build one engine per session.
    """

    def __init__(
        self,
        tier: Difficulty,
        language: Language = Language.ENGLISH,
        rng: Optional[random.Random] = None,
        narrator: Optional[Narrator] = None,
        score: int = 0,
    ):
        self.state = ProgressionState.for_tier(tier, score=score)
        self.language = language
        self.rng = rng or random.Random()
        self.narration = NarrationChannel(narrator)
        self.current_question: Optional[Question] = None
        self.feedback: Optional[int] = None

    def generate_question(self) -> Question:
        question = generate_question(self.state, self.rng)
        self.current_question = question
        self.feedback = None
        logger.debug(
            "question %s x %s options=%s (tier=%s score=%s level=%s)",
            question.num1,
            question.num2,
            list(question.options),
            self.state.tier.value,
            self.state.score,
            self.state.difficulty_level,
        )
        self.narration.announce_question(
            question_text(question.num1, question.num2, self.language), self.language
        )
        return question

    def evaluate_answer(self, question: Question, submitted: Optional[int]) -> Evaluation:
        self.narration.halt()
        result = evaluate_answer(self.state, question, submitted, self.rng)
        if result.correct:
            self.narration.announce_compliment(result.compliment)
        else:
            self.feedback = submitted
        if result.level_dropped:
            logger.info("difficulty level lowered to %s", self.state.difficulty_level)
        logger.debug(
            "answer %r for %s x %s: correct=%s delta=%s score=%s",
            submitted,
            question.num1,
            question.num2,
            result.correct,
            result.delta,
            result.score,
        )
        return result

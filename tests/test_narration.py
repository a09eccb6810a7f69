import random

from engine import Difficulty, DifficultyEngine
from narration import (
    COMPLIMENTS,
    Language,
    NarrationChannel,
    NarrationKind,
    pick_compliment,
    question_text,
)


class RecordingNarrator:
    def __init__(self):
        self.requests = []

    def speak(self, request):
        self.requests.append(request)


class BrokenNarrator:
    def speak(self, request):
        raise RuntimeError("speech synthesis not supported")


def test_question_text_per_language():
    assert question_text(6, 7, Language.ENGLISH) == "6 times 7"
    assert question_text(6, 7, Language.HEBREW) == "6 כפול 7"
    assert question_text(6, 7, Language.RUSSIAN) == "6 умножить на 7"


def test_standard_compliments_below_950():
    assert pick_compliment(945, random.Random(0)) in COMPLIMENTS


def test_question_narration_supersedes_previous():
    channel = NarrationChannel(RecordingNarrator())
    first = channel.announce_question("2 times 3", Language.ENGLISH)
    assert channel.is_current(first)
    second = channel.announce_question("4 times 5", Language.ENGLISH)
    assert second.token == first.token + 1
    assert not channel.is_current(first)
    assert channel.is_current(second)


def test_halt_stops_question_but_not_compliment():
    channel = NarrationChannel(RecordingNarrator())
    question = channel.announce_question("2 times 3", Language.HEBREW)
    channel.halt()
    assert not channel.is_current(question)

    compliment = channel.announce_compliment("Good!")
    assert compliment.language is Language.ENGLISH and compliment.locale == "en-US"
    channel.announce_question("4 times 5", Language.HEBREW)
    # one generation behind is still allowed to finish
    assert channel.is_current(compliment)
    channel.announce_question("6 times 7", Language.HEBREW)
    assert not channel.is_current(compliment)


def test_broken_narrator_does_not_block_the_game():
    engine = DifficultyEngine(Difficulty.EASY, rng=random.Random(1), narrator=BrokenNarrator())
    q = engine.generate_question()
    result = engine.evaluate_answer(q, q.answer)
    assert result.correct
    assert engine.generate_question() is not None


def test_engine_narrates_in_session_language():
    narrator = RecordingNarrator()
    engine = DifficultyEngine(
        Difficulty.HARD, language=Language.RUSSIAN, rng=random.Random(2), narrator=narrator
    )
    q = engine.generate_question()
    engine.evaluate_answer(q, q.answer)

    asked, praised = narrator.requests
    assert asked.kind is NarrationKind.QUESTION
    assert asked.text == f"{q.num1} умножить на {q.num2}"
    assert asked.locale == "ru-RU"
    assert praised.kind is NarrationKind.COMPLIMENT
    assert praised.language is Language.ENGLISH
    assert praised.token == asked.token


def test_wrong_answer_is_not_narrated():
    narrator = RecordingNarrator()
    engine = DifficultyEngine(Difficulty.HARD, rng=random.Random(3), narrator=narrator)
    q = engine.generate_question()
    engine.evaluate_answer(q, q.answer + 1)
    assert len(narrator.requests) == 1
    assert engine.narration.current() is None

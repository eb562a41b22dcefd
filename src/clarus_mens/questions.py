"""Keyword-based question answering stub."""

from typing import Dict, Mapping, Optional, Protocol

MAX_QUESTION_LENGTH = 500

DEFAULT_ANSWERS: Dict[str, str] = {
    "hello": "Hello there! How can I help you?",
    "what is your name": "I am Clarus Mens, an AI assistant.",
    "what time is it": "I don't have real-time capabilities, but you can check your device's clock.",
    "how does this work": "You ask a question, and I provide an answer using my AI capabilities.",
}

FALLBACK_ANSWER = (
    "I don't have an answer for that question yet. "
    "As we grow, I'll learn to answer more questions."
)


class QuestionService(Protocol):
    async def get_answer(self, question: str) -> str: ...


class SimpleQuestionService:
    """
    Answers from a fixed table.

    The first key, in table order, contained case-insensitively in the
    question supplies the answer.
    """

    def __init__(self, answers: Optional[Mapping[str, str]] = None, fallback: str = FALLBACK_ANSWER):
        self._answers = dict(DEFAULT_ANSWERS if answers is None else answers)
        self._fallback = fallback

    async def get_answer(self, question: str) -> str:
        folded = question.casefold()
        for key, answer in self._answers.items():
            if key.casefold() in folded:
                return answer
        return self._fallback

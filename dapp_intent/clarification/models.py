"""Clarification questions raised for human review."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ClarificationCategory(str, Enum):
    """What a clarification question is about."""

    SELECTOR = "selector"
    WAIT = "wait"
    NETWORK = "network"
    ACTION = "action"
    GENERAL = "general"


@dataclass(frozen=True)
class ClarificationQuestion:
    """An ambiguity that a human should resolve before code generation."""

    id: str
    category: ClarificationCategory
    question: str
    context: str
    step_index: Optional[int] = None
    options: tuple[str, ...] = ()
    default_answer: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.category.value,
            "question": self.question,
            "context": self.context,
            "options": list(self.options),
        }
        if self.step_index is not None:
            data["step_index"] = self.step_index
        if self.default_answer is not None:
            data["default_answer"] = self.default_answer
        return data


@dataclass(frozen=True)
class ClarificationAnswer:
    """A reviewer's answer; stored by the review workflow, never read back here."""

    question_id: str
    answer: str

    def to_dict(self) -> dict:
        return {"question_id": self.question_id, "answer": self.answer}

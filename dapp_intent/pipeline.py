"""Recording translation pipeline - analysis, intent plan and clarifications."""

from dataclasses import dataclass
from typing import Optional

from .analysis.analyzer import analyze_recording
from .analysis.models import AnalysisResult
from .clarification.detector import detect_clarifications
from .clarification.models import ClarificationQuestion
from .config import AnalysisSettings, get_settings
from .intent.models import IntentStep
from .intent.synthesizer import build_intent_steps
from .recording.models import Recording
from .utils.logging import log_operation


@dataclass(frozen=True)
class IntentPlan:
    """Everything derived from one recording."""

    analysis: AnalysisResult
    intent_steps: tuple[IntentStep, ...]
    clarifications: tuple[ClarificationQuestion, ...]

    @property
    def needs_clarification(self) -> bool:
        return bool(self.clarifications)

    def to_dict(self) -> dict:
        return {
            "analysis": self.analysis.to_dict(),
            "intent_steps": [step.to_dict() for step in self.intent_steps],
            "clarifications": [q.to_dict() for q in self.clarifications],
        }


def translate_recording(
    recording: Recording,
    settings: Optional[AnalysisSettings] = None,
) -> IntentPlan:
    """Analyze a recording and derive its intent plan and open questions.

    Safe to call concurrently for independent recordings; each call works
    only on its own locals.
    """
    settings = settings or get_settings()
    with log_operation("translate_recording", recording=recording.name) as op:
        analysis = analyze_recording(recording)
        intent_steps = build_intent_steps(analysis, settings)
        clarifications = detect_clarifications(analysis, settings)
        op["intent_steps"] = len(intent_steps)
        op["clarifications"] = len(clarifications)

    return IntentPlan(
        analysis=analysis,
        intent_steps=tuple(intent_steps),
        clarifications=tuple(clarifications),
    )

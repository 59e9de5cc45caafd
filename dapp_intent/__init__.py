"""Recording analysis and intent synthesis for dApp browser recordings.

Turns a recorded session (clicks, inputs, navigations, wallet-provider
calls) into detected flow patterns, an ordered plan of user intent and a
list of open questions for human review. Pure, synchronous and
side-effect free.
"""

from .analysis import AnalysisResult, FlowPattern, FlowPatternType, analyze_recording
from .clarification import ClarificationQuestion, detect_clarifications
from .intent import IntentStep, IntentStepType, build_intent_steps
from .pipeline import IntentPlan, translate_recording
from .recording import Recording, RecordingFormatError, load_recording

__version__ = "0.1.0"

__all__ = [
    "Recording",
    "RecordingFormatError",
    "load_recording",
    "AnalysisResult",
    "FlowPattern",
    "FlowPatternType",
    "analyze_recording",
    "IntentStep",
    "IntentStepType",
    "build_intent_steps",
    "ClarificationQuestion",
    "detect_clarifications",
    "IntentPlan",
    "translate_recording",
]

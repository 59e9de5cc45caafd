"""Intent synthesis - semantic steps derived from a recording analysis."""

from .models import IntentStep, IntentStepType
from .synthesizer import (
    build_intent_steps,
    collapse_form_fields,
    is_network_switch_click,
    is_wallet_selection_click,
)

__all__ = [
    "IntentStep",
    "IntentStepType",
    "build_intent_steps",
    "collapse_form_fields",
    "is_network_switch_click",
    "is_wallet_selection_click",
]

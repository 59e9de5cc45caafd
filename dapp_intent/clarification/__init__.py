"""Clarification detection - open questions for human review."""

from .detector import (
    detect_action_ambiguities,
    detect_clarifications,
    detect_network_ambiguities,
    detect_selector_ambiguities,
    detect_wait_ambiguities,
    has_css_in_js_class,
    is_generic_selector,
)
from .models import ClarificationAnswer, ClarificationCategory, ClarificationQuestion

__all__ = [
    # Models
    "ClarificationCategory",
    "ClarificationQuestion",
    "ClarificationAnswer",
    # Detection
    "detect_clarifications",
    "detect_selector_ambiguities",
    "detect_wait_ambiguities",
    "detect_network_ambiguities",
    "detect_action_ambiguities",
    "is_generic_selector",
    "has_css_in_js_class",
]

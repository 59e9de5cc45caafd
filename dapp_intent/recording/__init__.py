"""Recorded dApp sessions - typed steps parsed from the extension's JSON."""

from .loader import load_recording
from .models import (
    ClickStep,
    ConsoleLogEntry,
    ElementMetadata,
    InputStep,
    NavigationStep,
    Recording,
    RecordingFormatError,
    RecordingStep,
    ScrollStep,
    Step,
    StepType,
    Web3ProviderInfo,
    Web3Step,
    parse_step,
)

__all__ = [
    # Models
    "StepType",
    "RecordingStep",
    "ClickStep",
    "InputStep",
    "NavigationStep",
    "Web3Step",
    "ScrollStep",
    "Step",
    "ElementMetadata",
    "Web3ProviderInfo",
    "ConsoleLogEntry",
    "Recording",
    "RecordingFormatError",
    "parse_step",
    # Loading
    "load_recording",
]

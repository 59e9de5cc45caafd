"""Data models for recorded dApp sessions.

A recording is the JSON document the browser extension uploads: a start URL,
an ordered list of steps and a few flags captured when recording began.
Steps are immutable once parsed; the analysis pipeline only reads them.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class RecordingFormatError(ValueError):
    """Raised when a recording does not have the shape the pipeline expects."""


class StepType(str, Enum):
    """Step discriminants used by the recorder."""

    CLICK = "click"
    INPUT = "input"
    NAVIGATION = "navigation"
    WEB3 = "web3"
    SCROLL = "scroll"


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _opt_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a valid chain id or offset
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _number(value: Any, default: int = 0) -> int:
    parsed = _opt_int(value)
    if parsed is None and isinstance(value, float) and math.isfinite(value):
        return int(value)
    return default if parsed is None else parsed


def _compact(data: dict) -> dict:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ElementMetadata:
    """Element details captured next to a click or input."""

    test_id: Optional[str] = None
    tag_name: Optional[str] = None
    text: Optional[str] = None
    aria_label: Optional[str] = None
    class_name: Optional[str] = None
    placeholder: Optional[str] = None
    input_type: Optional[str] = None
    parent_outer_html: Optional[str] = None
    nearby_text: Optional[str] = None
    page_title: Optional[str] = None
    heading_context: Optional[str] = None

    _WIRE_KEYS: ClassVar[dict[str, str]] = {
        "test_id": "dataTestId",
        "tag_name": "tagName",
        "text": "text",
        "aria_label": "ariaLabel",
        "class_name": "className",
        "placeholder": "placeholder",
        "input_type": "inputType",
        "parent_outer_html": "parentOuterHTML",
        "nearby_text": "nearbyText",
        "page_title": "pageTitle",
        "heading_context": "headingContext",
    }

    @classmethod
    def from_dict(cls, data: Any) -> "ElementMetadata":
        """Create metadata from the recorder's camelCase object."""
        if not isinstance(data, dict):
            return cls()
        return cls(**{
            attr: _opt_str(data.get(wire))
            for attr, wire in cls._WIRE_KEYS.items()
        })

    def to_dict(self) -> dict:
        return _compact({
            wire: getattr(self, attr)
            for attr, wire in self._WIRE_KEYS.items()
        })

    @property
    def lower_text(self) -> str:
        """Visible text lowercased, empty when absent."""
        return (self.text or "").lower()

    @property
    def lower_test_id(self) -> str:
        return (self.test_id or "").lower()


@dataclass(frozen=True)
class Web3ProviderInfo:
    """EIP-6963 style identity of the injected wallet provider."""

    name: str
    icon: Optional[str] = None
    rdns: Optional[str] = None
    uuid: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Web3ProviderInfo"]:
        if not isinstance(data, dict):
            return None
        name = _opt_str(data.get("name"))
        if not name:
            return None
        return cls(
            name=name,
            icon=_opt_str(data.get("icon")),
            rdns=_opt_str(data.get("rdns")),
            uuid=_opt_str(data.get("uuid")),
        )

    def to_dict(self) -> dict:
        return _compact({
            "name": self.name,
            "icon": self.icon,
            "rdns": self.rdns,
            "uuid": self.uuid,
        })


@dataclass(frozen=True)
class RecordingStep:
    """Fields shared by every step variant."""

    id: str
    timestamp: int

    type: ClassVar[StepType]

    def _base_dict(self) -> dict:
        return {"id": self.id, "type": self.type.value, "timestamp": self.timestamp}

    def to_dict(self) -> dict:
        return self._base_dict()


@dataclass(frozen=True)
class ClickStep(RecordingStep):
    """A click on a page element."""

    selector: str = ""
    metadata: ElementMetadata = field(default_factory=ElementMetadata)
    screenshot: Optional[str] = None

    type: ClassVar[StepType] = StepType.CLICK

    @property
    def label(self) -> str:
        """Visible text, falling back to the ARIA label."""
        return self.metadata.text or self.metadata.aria_label or ""

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["selector"] = self.selector
        meta = self.metadata.to_dict()
        if meta:
            data["metadata"] = meta
        if self.screenshot is not None:
            data["screenshot"] = self.screenshot
        return data


@dataclass(frozen=True)
class InputStep(RecordingStep):
    """A value typed into a form field.

    The recorder emits one step per keystroke burst, so ``value`` is the
    field content at that moment, not necessarily the final one.
    """

    selector: str = ""
    value: str = ""
    metadata: ElementMetadata = field(default_factory=ElementMetadata)
    screenshot: Optional[str] = None

    type: ClassVar[StepType] = StepType.INPUT

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["selector"] = self.selector
        data["value"] = self.value
        meta = self.metadata.to_dict()
        if meta:
            data["metadata"] = meta
        if self.screenshot is not None:
            data["screenshot"] = self.screenshot
        return data


@dataclass(frozen=True)
class NavigationStep(RecordingStep):
    """A page navigation."""

    url: str = ""
    from_url: Optional[str] = None

    type: ClassVar[StepType] = StepType.NAVIGATION

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["url"] = self.url
        if self.from_url is not None:
            data["fromUrl"] = self.from_url
        return data


@dataclass(frozen=True)
class Web3Step(RecordingStep):
    """A call made by the page to the injected wallet provider."""

    method: str = ""
    params: Any = None
    result: Any = None
    chain_id: Optional[int] = None
    provider: Optional[Web3ProviderInfo] = None
    screenshot: Optional[str] = None

    type: ClassVar[StepType] = StepType.WEB3

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["web3Method"] = self.method
        data.update(_compact({
            "web3Params": self.params,
            "web3Result": self.result,
            "chainId": self.chain_id,
            "web3ProviderInfo": self.provider.to_dict() if self.provider else None,
            "screenshot": self.screenshot,
        }))
        return data


@dataclass(frozen=True)
class ScrollStep(RecordingStep):
    """A scroll to the given page offsets."""

    scroll_x: int = 0
    scroll_y: int = 0

    type: ClassVar[StepType] = StepType.SCROLL

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["scrollX"] = self.scroll_x
        data["scrollY"] = self.scroll_y
        return data


Step = Union[ClickStep, InputStep, NavigationStep, Web3Step, ScrollStep]


def parse_step(data: Any, position: int = 0) -> Step:
    """Build a typed step from one recorded step object.

    Args:
        data: Step object as found in the recording JSON
        position: Index of the step, used for error messages and missing ids

    Returns:
        The matching step variant

    Raises:
        RecordingFormatError: If the step is not an object or its type is
            missing or unknown
    """
    if not isinstance(data, dict):
        raise RecordingFormatError(f"Step {position} is not an object")

    raw_type = data.get("type")
    try:
        step_type = StepType(raw_type)
    except ValueError:
        raise RecordingFormatError(
            f"Step {position} has unsupported type {raw_type!r}"
        ) from None

    step_id = _opt_str(data.get("id")) or f"step-{position}"
    timestamp = _number(data.get("timestamp"))

    if step_type == StepType.CLICK:
        return ClickStep(
            id=step_id,
            timestamp=timestamp,
            selector=_opt_str(data.get("selector")) or "",
            metadata=ElementMetadata.from_dict(data.get("metadata")),
            screenshot=_opt_str(data.get("screenshot")),
        )
    if step_type == StepType.INPUT:
        return InputStep(
            id=step_id,
            timestamp=timestamp,
            selector=_opt_str(data.get("selector")) or "",
            value=_opt_str(data.get("value")) or "",
            metadata=ElementMetadata.from_dict(data.get("metadata")),
            screenshot=_opt_str(data.get("screenshot")),
        )
    if step_type == StepType.NAVIGATION:
        return NavigationStep(
            id=step_id,
            timestamp=timestamp,
            url=_opt_str(data.get("url")) or "",
            from_url=_opt_str(data.get("fromUrl")),
        )
    if step_type == StepType.WEB3:
        return Web3Step(
            id=step_id,
            timestamp=timestamp,
            method=_opt_str(data.get("web3Method")) or "",
            params=data.get("web3Params"),
            result=data.get("web3Result"),
            chain_id=_opt_int(data.get("chainId")),
            provider=Web3ProviderInfo.from_dict(data.get("web3ProviderInfo")),
            screenshot=_opt_str(data.get("screenshot")),
        )
    return ScrollStep(
        id=step_id,
        timestamp=timestamp,
        scroll_x=_number(data.get("scrollX")),
        scroll_y=_number(data.get("scrollY")),
    )


@dataclass(frozen=True)
class ConsoleLogEntry:
    """A console message captured while recording."""

    level: str
    args: tuple[str, ...] = ()
    timestamp: int = 0

    LEVELS: ClassVar[tuple[str, ...]] = ("log", "warn", "error", "info")

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ConsoleLogEntry"]:
        if not isinstance(data, dict) or data.get("level") not in cls.LEVELS:
            return None
        args = data.get("args")
        return cls(
            level=data["level"],
            args=tuple(a for a in args if isinstance(a, str)) if isinstance(args, list) else (),
            timestamp=_number(data.get("timestamp")),
        )

    def to_dict(self) -> dict:
        return {"level": self.level, "args": list(self.args), "timestamp": self.timestamp}


@dataclass(frozen=True)
class Recording:
    """A complete recorded session."""

    name: str
    start_url: str
    steps: tuple[Step, ...] = ()
    wallet_connected: bool = False
    wallet_address: Optional[str] = None
    duration_ms: Optional[int] = None
    console_logs: tuple[ConsoleLogEntry, ...] = ()
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Recording":
        """Create a Recording from the extension's JSON object.

        Raises:
            RecordingFormatError: If the recording or one of its steps is
                structurally invalid
        """
        if not isinstance(data, dict):
            raise RecordingFormatError("Recording must be a JSON object")

        raw_steps = data.get("steps", [])
        if not isinstance(raw_steps, list):
            raise RecordingFormatError("Recording steps must be a list")

        raw_logs = data.get("consoleLogs")
        logs = []
        if isinstance(raw_logs, list):
            for entry in raw_logs:
                parsed = ConsoleLogEntry.from_dict(entry)
                if parsed is not None:
                    logs.append(parsed)

        metadata = data.get("metadata")
        wallet_connected = data.get("walletConnected")

        return cls(
            name=_opt_str(data.get("name")) or "",
            start_url=_opt_str(data.get("startUrl")) or "",
            steps=tuple(parse_step(s, i) for i, s in enumerate(raw_steps)),
            wallet_connected=wallet_connected if isinstance(wallet_connected, bool) else False,
            wallet_address=_opt_str(data.get("walletAddress")),
            duration_ms=_opt_int(data.get("durationMs")),
            console_logs=tuple(logs),
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "startUrl": self.start_url,
            "steps": [step.to_dict() for step in self.steps],
            "walletConnected": self.wallet_connected,
            "walletAddress": self.wallet_address,
        }
        if self.duration_ms is not None:
            data["durationMs"] = self.duration_ms
        if self.console_logs:
            data["consoleLogs"] = [entry.to_dict() for entry in self.console_logs]
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data

    @property
    def step_count(self) -> int:
        return len(self.steps)

"""Data models produced by recording analysis."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..recording.models import Recording, Step


class FlowPatternType(str, Enum):
    """Semantic flow patterns that can be detected in a recording."""

    WALLET_CONNECT = "wallet_connect"
    WALLET_SIGN = "wallet_sign"
    WALLET_APPROVE = "wallet_approve"
    NETWORK_SWITCH = "network_switch"
    TOKEN_SWAP = "token_swap"
    TOKEN_TRANSFER = "token_transfer"
    NFT_MINT = "nft_mint"
    NFT_TRANSFER = "nft_transfer"
    DEFI_DEPOSIT = "defi_deposit"
    DEFI_WITHDRAW = "defi_withdraw"
    TRADE_OPEN = "trade_open"
    TRADE_CLOSE = "trade_close"
    FORM_FILL = "form_fill"
    NAVIGATION = "navigation"
    UNKNOWN = "unknown"


class TestType(str, Enum):
    """Whether a recording covers wallet connection or assumes it."""

    __test__ = False  # not a pytest test class

    CONNECTION = "connection"
    FLOW = "flow"


class DappConnectionPattern(str, Enum):
    """Wallet-connection UI library recognised from click steps."""

    PRIVY = "privy"
    RAINBOWKIT = "rainbowkit"
    WEB3MODAL = "web3modal"
    CUSTOM = "custom"
    UNKNOWN = "unknown"


# Most significant first
PRIMARY_FLOW_PRIORITY = (
    FlowPatternType.TRADE_OPEN,
    FlowPatternType.TRADE_CLOSE,
    FlowPatternType.TOKEN_SWAP,
    FlowPatternType.DEFI_DEPOSIT,
    FlowPatternType.DEFI_WITHDRAW,
    FlowPatternType.NFT_MINT,
    FlowPatternType.WALLET_APPROVE,
    FlowPatternType.WALLET_SIGN,
    FlowPatternType.WALLET_CONNECT,
    FlowPatternType.FORM_FILL,
    FlowPatternType.NAVIGATION,
)


@dataclass(frozen=True)
class FlowPattern:
    """A confidence-scored cluster of steps with one semantic meaning.

    ``start_index`` and ``end_index`` are inclusive positions in the
    recording's step sequence. ``steps`` holds only the steps that make up
    the pattern, which can be fewer than the range they span.
    """

    type: FlowPatternType
    start_index: int
    end_index: int
    steps: tuple[Step, ...]
    confidence: float
    metadata: dict = field(default_factory=dict)

    @property
    def indices(self) -> range:
        """Every recording index covered by the pattern."""
        return range(self.start_index, self.end_index + 1)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "step_ids": [step.id for step in self.steps],
            "confidence": self.confidence,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Everything learned about one recording."""

    recording: Recording
    patterns: tuple[FlowPattern, ...]
    test_type: TestType
    dapp_connection_pattern: DappConnectionPattern
    detected_chain_id: Optional[int] = None
    detected_wallet: Optional[str] = None
    suggested_imports: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    wallet_connected: bool = False
    wallet_address: Optional[str] = None

    def patterns_by_type(self, pattern_type: FlowPatternType) -> list[FlowPattern]:
        """Get patterns of a specific type."""
        return [p for p in self.patterns if p.type == pattern_type]

    def has_pattern(self, pattern_type: FlowPatternType) -> bool:
        """Check if the recording contains a specific pattern type."""
        return any(p.type == pattern_type for p in self.patterns)

    def primary_flow_type(self) -> FlowPatternType:
        """Get the most significant pattern type in the recording."""
        for pattern_type in PRIMARY_FLOW_PRIORITY:
            if self.has_pattern(pattern_type):
                return pattern_type
        return FlowPatternType.UNKNOWN

    def to_dict(self, include_recording: bool = False) -> dict:
        """Convert to a JSON-serialisable dictionary."""
        data = {
            "recording_name": self.recording.name,
            "start_url": self.recording.start_url,
            "step_count": self.recording.step_count,
            "patterns": [p.to_dict() for p in self.patterns],
            "primary_flow_type": self.primary_flow_type().value,
            "detected_chain_id": self.detected_chain_id,
            "detected_wallet": self.detected_wallet,
            "suggested_imports": list(self.suggested_imports),
            "warnings": list(self.warnings),
            "wallet_connected": self.wallet_connected,
            "wallet_address": self.wallet_address,
            "test_type": self.test_type.value,
            "dapp_connection_pattern": self.dapp_connection_pattern.value,
        }
        if include_recording:
            data["recording"] = self.recording.to_dict()
        return data

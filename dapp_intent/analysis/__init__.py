"""Recording analysis - flow patterns, chain/wallet extraction, classification."""

from .analyzer import analyze_recording, collect_warnings, suggest_imports
from .classifiers import classify_test_type, detect_connection_pattern
from .extractors import (
    CHAIN_ID_TO_NETWORK,
    extract_chain_id,
    extract_wallet_name,
    network_name,
    parse_chain_id,
    parse_hex_chain_id,
)
from .models import (
    AnalysisResult,
    DappConnectionPattern,
    FlowPattern,
    FlowPatternType,
    TestType,
)
from .noise import POLLING_METHODS, compact_steps_for_prompt, is_polling_call
from .patterns import (
    detect_form_fill,
    detect_navigation,
    detect_network_switch,
    detect_patterns,
    detect_trade_open,
    detect_wallet_approve,
    detect_wallet_connect,
    detect_wallet_sign,
)

__all__ = [
    # Models
    "AnalysisResult",
    "FlowPattern",
    "FlowPatternType",
    "TestType",
    "DappConnectionPattern",
    # Analyzer
    "analyze_recording",
    "suggest_imports",
    "collect_warnings",
    # Detectors
    "detect_patterns",
    "detect_wallet_connect",
    "detect_wallet_sign",
    "detect_network_switch",
    "detect_trade_open",
    "detect_wallet_approve",
    "detect_form_fill",
    "detect_navigation",
    # Classifiers
    "classify_test_type",
    "detect_connection_pattern",
    # Extractors
    "CHAIN_ID_TO_NETWORK",
    "parse_chain_id",
    "parse_hex_chain_id",
    "network_name",
    "extract_chain_id",
    "extract_wallet_name",
    # Noise
    "POLLING_METHODS",
    "is_polling_call",
    "compact_steps_for_prompt",
]

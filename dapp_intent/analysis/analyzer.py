"""Recording analyzer - detect flow patterns and classify a recording.

Analysis is a pure function of the recording: the same input always
yields an equal AnalysisResult, and nothing is shared between calls.
"""

from collections.abc import Sequence
from typing import Optional

import structlog

from ..recording.models import Recording
from .classifiers import classify_test_type, detect_connection_pattern
from .extractors import extract_chain_id, extract_wallet_name
from .models import AnalysisResult, FlowPattern, FlowPatternType, TestType
from .patterns import detect_patterns

logger = structlog.get_logger()

FIXTURE_IMPORT = "import { test, expect } from '../../fixtures/wallet.fixture'"
NETWORK_SWITCH_HELPER = "import { switchNetwork } from '../../helpers/network-switch'"
WALLET_POPUP_HELPER = "import { handleMetaMaskPopup } from '../../helpers/metamask-popup'"

POPUP_PATTERNS = frozenset({
    FlowPatternType.WALLET_SIGN,
    FlowPatternType.WALLET_APPROVE,
    FlowPatternType.TRADE_OPEN,
    FlowPatternType.TRADE_CLOSE,
})


def suggest_imports(patterns: Sequence[FlowPattern]) -> list[str]:
    """Suggest test-file imports based on the detected patterns."""
    imports = [FIXTURE_IMPORT]
    pattern_types = {p.type for p in patterns}

    if FlowPatternType.NETWORK_SWITCH in pattern_types:
        imports.append(NETWORK_SWITCH_HELPER)
    if pattern_types & POPUP_PATTERNS:
        imports.append(WALLET_POPUP_HELPER)

    return imports


def collect_warnings(
    recording: Recording,
    patterns: Sequence[FlowPattern],
    chain_id: Optional[int],
    test_type: TestType,
) -> list[str]:
    """Collect informational warnings about the analysis."""
    warnings = []

    if not recording.steps:
        warnings.append("Recording contains no steps")

    if chain_id is None:
        warnings.append("No chain ID detected in recording, defaulting to unknown network")

    if any(p.metadata.get("implicit") for p in patterns if p.type == FlowPatternType.NETWORK_SWITCH):
        warnings.append(
            "Network switch inferred from eth_chainId results; "
            "verify the switch was user-initiated"
        )

    if test_type == TestType.FLOW and any(p.type == FlowPatternType.WALLET_CONNECT for p in patterns):
        warnings.append(
            "Wallet connection steps found in a flow recording; "
            "they will be skipped because the wallet is expected to be connected"
        )

    return warnings


def analyze_recording(recording: Recording) -> AnalysisResult:
    """Analyze a recording.

    Runs every pattern detector, extracts chain and wallet information,
    classifies the test type and detects the connection UI library.

    Args:
        recording: A parsed recording

    Returns:
        AnalysisResult with patterns sorted by start index
    """
    steps = recording.steps
    log = logger.bind(recording=recording.name)

    patterns = detect_patterns(steps)
    chain_id = extract_chain_id(steps)
    wallet_name = extract_wallet_name(steps)
    test_type = classify_test_type(steps, recording.wallet_connected)
    connection_pattern = detect_connection_pattern(steps, patterns)

    result = AnalysisResult(
        recording=recording,
        patterns=tuple(patterns),
        test_type=test_type,
        dapp_connection_pattern=connection_pattern,
        detected_chain_id=chain_id,
        detected_wallet=wallet_name,
        suggested_imports=tuple(suggest_imports(patterns)),
        warnings=tuple(collect_warnings(recording, patterns, chain_id, test_type)),
        wallet_connected=recording.wallet_connected,
        wallet_address=recording.wallet_address,
    )

    log.info(
        "Recording analyzed",
        step_count=len(steps),
        pattern_count=len(patterns),
        test_type=test_type.value,
        connection_pattern=connection_pattern.value,
        chain_id=chain_id,
    )
    return result

"""Clarification detection - find places where automatic inference is unsafe.

The detector reads an AnalysisResult and never modifies it. Its questions
are advisory: analysis and intent synthesis complete without them.
"""

import math
import re
from typing import Optional

import structlog

from ..analysis.extractors import network_name
from ..analysis.models import AnalysisResult, FlowPatternType
from ..analysis.patterns import SEND_TRANSACTION_METHOD, is_call
from ..config import AnalysisSettings, get_settings
from ..recording.models import ClickStep
from .models import ClarificationCategory, ClarificationQuestion

logger = structlog.get_logger()

GENERIC_SELECTOR_PATTERNS = (
    re.compile(r"^div$"),
    re.compile(r"^button$"),
    re.compile(r"^span$"),
    re.compile(r"^a$"),
    re.compile(r"^div:nth-child\(\d+\)$"),
    re.compile(r"^button:nth-child\(\d+\)$"),
    re.compile(r"div\s+div\s+div"),
    re.compile(r"button\s+span$"),
)

CSS_IN_JS_PATTERNS = (
    re.compile(r"\.[a-zA-Z]+_[a-zA-Z0-9]+__[a-zA-Z0-9]+"),  # CSS Modules
    re.compile(r"\.css-[a-z0-9]+"),  # Emotion
    re.compile(r"\.sc-[a-zA-Z]+"),  # styled-components
    re.compile(r"\.[a-zA-Z]+-[a-zA-Z0-9]{5,}"),  # hashed utility classes
    re.compile(r"\.jsx?-\d+"),  # JSS
)

NON_DEFAULT_WALLETS = ("rabby", "coinbase", "walletconnect", "rainbow")

TX_WAIT_DEFAULT = "Wait for success toast/notification"
NETWORK_DEFAULT = "Let dApp trigger network switch and approve in wallet"
APPROVAL_DEFAULT = "Use default amount from dApp"


def is_generic_selector(selector: str) -> bool:
    """Check if a selector is too generic to be unique."""
    return any(p.search(selector) for p in GENERIC_SELECTOR_PATTERNS)


def has_css_in_js_class(selector: str) -> bool:
    """Check if a selector relies on generated class names."""
    return any(p.search(selector) for p in CSS_IN_JS_PATTERNS)


def _click_context(index: int, step: ClickStep) -> str:
    return f'Step {index + 1}: Click on "{step.metadata.text or "element"}"'


def detect_selector_ambiguities(analysis: AnalysisResult) -> list[ClarificationQuestion]:
    """Flag clicks whose selectors are generic or use generated class names."""
    questions = []
    for i, step in enumerate(analysis.recording.steps):
        if not isinstance(step, ClickStep):
            continue
        text = step.metadata.text
        test_id = step.metadata.test_id

        if is_generic_selector(step.selector):
            default: Optional[str] = None
            if test_id:
                default = f'Use data-testid: "{test_id}"'
            elif text:
                default = f'Use text: "{text}"'

            options = []
            if text:
                options.append(f'Use text: "{text}"')
            options.extend([
                "Use data-testid if available",
                "Use role + name combination",
                "Keep original selector with .first()",
            ])
            questions.append(ClarificationQuestion(
                id=f"selector-{i}",
                category=ClarificationCategory.SELECTOR,
                question=(
                    f'The selector "{step.selector}" may not be unique. '
                    "What alternative selector strategy should we use?"
                ),
                context=_click_context(i, step),
                step_index=i,
                options=tuple(options),
                default_answer=default,
            ))

        if has_css_in_js_class(step.selector):
            questions.append(ClarificationQuestion(
                id=f"cssjs-{i}",
                category=ClarificationCategory.SELECTOR,
                question=(
                    f'The selector "{step.selector}" contains dynamically generated '
                    "class names that may change. How should we handle this?"
                ),
                context=_click_context(i, step),
                step_index=i,
                options=(
                    "Use text content instead",
                    "Use role-based selector",
                    "Use parent element with stable selector",
                    "Add data-testid to the element (requires code change)",
                ),
                default_answer=f'Use data-testid: "{test_id}"' if test_id else None,
            ))
    return questions


def detect_wait_ambiguities(
    analysis: AnalysisResult,
    settings: AnalysisSettings,
) -> list[ClarificationQuestion]:
    """Ask what to wait for after long pauses and after every transaction."""
    questions = []
    steps = analysis.recording.steps

    for i in range(1, len(steps)):
        gap_ms = steps[i].timestamp - steps[i - 1].timestamp
        if gap_ms <= settings.wait_gap_threshold_ms:
            continue
        questions.append(ClarificationQuestion(
            id=f"wait-{i}",
            category=ClarificationCategory.WAIT,
            question=(
                f"There was a {gap_ms / 1000:.1f}s pause before this step. "
                "What should the test wait for?"
            ),
            context=f"Between step {i} and {i + 1}",
            step_index=i,
            options=(
                "Wait for network request to complete",
                "Wait for specific element to appear",
                "Wait for loading indicator to disappear",
                f"Use fixed timeout ({math.ceil(gap_ms / 1000)}s)",
            ),
        ))

    for i, step in enumerate(steps):
        if not is_call(step, SEND_TRANSACTION_METHOD):
            continue
        questions.append(ClarificationQuestion(
            id=f"txwait-{i}",
            category=ClarificationCategory.WAIT,
            question="How should we wait for transaction confirmation?",
            context=f"After transaction at step {i + 1}",
            step_index=i,
            options=(
                TX_WAIT_DEFAULT,
                "Wait for balance update",
                "Wait for specific UI element change",
                "Use fixed timeout (10s)",
            ),
            default_answer=TX_WAIT_DEFAULT,
        ))
    return questions


def detect_network_ambiguities(
    analysis: AnalysisResult,
    settings: AnalysisSettings,
) -> list[ClarificationQuestion]:
    """Ask once how to set up the network when the recording ran elsewhere."""
    chain_id = analysis.detected_chain_id
    if chain_id is None or chain_id == settings.default_chain_id:
        return []

    name = network_name(chain_id)
    chain_label = f"chain ID {chain_id} ({name})" if name else f"chain ID {chain_id}"
    return [ClarificationQuestion(
        id="network-setup",
        category=ClarificationCategory.NETWORK,
        question=(
            f"The recording was made on {chain_label}. "
            "How should the test handle network setup?"
        ),
        context="Test initialization",
        options=(
            f"Add network to {settings.test_wallet} at start and switch to it",
            "Assume network is already configured",
            NETWORK_DEFAULT,
        ),
        default_answer=NETWORK_DEFAULT,
    )]


def detect_action_ambiguities(
    analysis: AnalysisResult,
    settings: AnalysisSettings,
) -> list[ClarificationQuestion]:
    """Flag wallet choices that differ from the test wallet, and approvals."""
    questions = []
    keep_wallet = f"Yes, use {settings.test_wallet}"

    for i, step in enumerate(analysis.recording.steps):
        if not isinstance(step, ClickStep):
            continue
        if not any(w in step.metadata.lower_text for w in NON_DEFAULT_WALLETS):
            continue
        questions.append(ClarificationQuestion(
            id=f"wallet-{i}",
            category=ClarificationCategory.ACTION,
            question=(
                f'The recording selected "{step.metadata.text}" wallet. '
                f"The test will use {settings.test_wallet} instead. Is this correct?"
            ),
            context=f"Step {i + 1}: Wallet selection",
            step_index=i,
            options=(keep_wallet, "Configure a different test wallet"),
            default_answer=keep_wallet,
        ))

    for pattern in analysis.patterns_by_type(FlowPatternType.WALLET_APPROVE):
        questions.append(ClarificationQuestion(
            id=f"approve-{pattern.start_index}",
            category=ClarificationCategory.ACTION,
            question="Token approval detected. What approval amount should the test use?",
            context=f"Approval flow at steps {pattern.start_index}-{pattern.end_index}",
            step_index=pattern.start_index,
            options=(
                "Approve exact amount needed",
                "Approve unlimited (max uint256)",
                APPROVAL_DEFAULT,
            ),
            default_answer=APPROVAL_DEFAULT,
        ))
    return questions


def detect_clarifications(
    analysis: AnalysisResult,
    settings: Optional[AnalysisSettings] = None,
) -> list[ClarificationQuestion]:
    """Detect every ambiguity that needs a human answer.

    Args:
        analysis: Result of analyze_recording
        settings: Analysis settings (defaults to get_settings())

    Returns:
        Questions grouped by pass: selector, wait, network, action
    """
    settings = settings or get_settings()
    questions = [
        *detect_selector_ambiguities(analysis),
        *detect_wait_ambiguities(analysis, settings),
        *detect_network_ambiguities(analysis, settings),
        *detect_action_ambiguities(analysis, settings),
    ]
    logger.debug(
        "Clarifications detected",
        recording=analysis.recording.name,
        count=len(questions),
    )
    return questions

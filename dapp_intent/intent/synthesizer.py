"""Intent synthesis - collapse a recording into an ordered list of goals.

Detected flow patterns become one intent step each; recording steps not
covered by any pattern become raw click, fill or navigate steps unless they
are noise. Everything is merged back into recording order and numbered.
"""

import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Callable, Optional

import structlog

from ..analysis.extractors import CHAIN_ID_TO_NETWORK, network_name
from ..analysis.models import (
    AnalysisResult,
    DappConnectionPattern,
    FlowPattern,
    FlowPatternType,
    TestType,
)
from ..analysis.noise import is_polling_call
from ..config import AnalysisSettings, get_settings
from ..recording.models import ClickStep, InputStep, NavigationStep, ScrollStep, Step
from .models import IntentStep, IntentStepType

logger = structlog.get_logger()

NETWORK_CLICK_PATTERN = re.compile(
    r"switch\s*(to\s*)?(network|base|arbitrum|polygon|optimism|mainnet|bnb|avalanche)",
    re.IGNORECASE,
)
WALLET_CLICK_PATTERN = re.compile(
    r"^(connect|login|sign\s*in|metamask|continue\s*with|wallet)",
    re.IGNORECASE,
)
TEST_ID_IN_SELECTOR = re.compile(r'data-testid="([^"]+)"')

# Intent ids are assigned once the final order is known
_UNASSIGNED = ""

PatternBuilder = Callable[
    [FlowPattern, tuple[int, ...], AnalysisResult, AnalysisSettings],
    Optional[IntentStep],
]


def _click_hints(steps: Sequence[Step]) -> list[dict]:
    return [
        {
            "selector": s.selector,
            "text": s.metadata.text,
            "test_id": s.metadata.test_id,
        }
        for s in steps
        if isinstance(s, ClickStep)
    ]


def collapse_form_fields(inputs: Sequence[InputStep]) -> list[dict]:
    """Reduce recorded input steps to one entry per form field.

    The recorder captures every keystroke burst, so a field typed as "7"
    and then "100" appears twice. Fields are keyed by selector, then test
    id, then placeholder; the last recorded value wins and each field keeps
    the position of its first write.
    """
    fields: dict[str, dict] = {}
    for step in inputs:
        key = (
            step.selector
            or step.metadata.test_id
            or step.metadata.placeholder
            or f"field-{len(fields)}"
        )
        test_id = step.metadata.test_id
        if not test_id:
            match = TEST_ID_IN_SELECTOR.search(step.selector)
            test_id = match.group(1) if match else None
        fields[key] = {
            "selector": step.selector,
            "value": step.value,
            "placeholder": step.metadata.placeholder,
            "test_id": test_id,
        }
    return list(fields.values())


def _describe_field(field: dict) -> str:
    name = (field["test_id"] or "").replace("-", " ") or field["placeholder"] or "field"
    return f"{name}={field['value']}"


def _connect_wallet(pattern, indices, analysis, settings):
    # The wallet is already connected when a flow test starts
    if analysis.test_type == TestType.FLOW:
        return None

    connection = analysis.dapp_connection_pattern
    description = (
        f"Connect wallet via {connection.value}"
        if connection != DappConnectionPattern.UNKNOWN
        else "Connect wallet"
    )
    return IntentStep(
        id=_UNASSIGNED,
        description=description,
        type=IntentStepType.CONNECT_WALLET,
        source_step_indices=indices,
        context={
            "dapp_connection_pattern": connection.value,
            "click_hints": _click_hints(pattern.steps),
        },
    )


def _sign_message(pattern, indices, analysis, settings):
    is_siwe = analysis.dapp_connection_pattern == DappConnectionPattern.PRIVY or any(
        p.type == FlowPatternType.WALLET_CONNECT and p.end_index < pattern.start_index
        for p in analysis.patterns
    )
    return IntentStep(
        id=_UNASSIGNED,
        description=f"Sign message in {settings.test_wallet}",
        type=IntentStepType.SIGN_MESSAGE,
        source_step_indices=indices,
        context={"is_siwe": is_siwe},
    )


def _switch_network(pattern, indices, analysis, settings):
    chain_id = pattern.metadata.get("chain_id")
    name = network_name(chain_id)
    if name:
        description = f"Switch network to {name}"
    elif chain_id is not None:
        description = f"Switch network to chain {chain_id}"
    else:
        description = "Switch network"
    return IntentStep(
        id=_UNASSIGNED,
        description=description,
        type=IntentStepType.SWITCH_NETWORK,
        source_step_indices=indices,
        context={"chain_id": chain_id, "network_name": name},
    )


def _confirm_transaction(pattern, indices, analysis, settings):
    clicks = [s for s in pattern.steps if isinstance(s, ClickStep)]
    summary = " → ".join(s.metadata.text for s in clicks if s.metadata.text)
    prefix = "Approve token" if pattern.type == FlowPatternType.WALLET_APPROVE else "Execute trade"
    return IntentStep(
        id=_UNASSIGNED,
        description=f"{prefix}: {summary or pattern.type.value}",
        type=IntentStepType.CONFIRM_TRANSACTION,
        source_step_indices=indices,
        context={"click_hints": _click_hints(clicks)},
    )


def _fill_form(pattern, indices, analysis, settings):
    fields = collapse_form_fields([s for s in pattern.steps if isinstance(s, InputStep)])
    return IntentStep(
        id=_UNASSIGNED,
        description=f"Fill form: {', '.join(_describe_field(f) for f in fields)}",
        type=IntentStepType.FILL_FORM,
        source_step_indices=indices,
        context={"fields": fields},
    )


def _navigate(pattern, indices, analysis, settings):
    url = pattern.metadata.get("url")
    if not url:
        return None
    return IntentStep(
        id=_UNASSIGNED,
        description=f"Navigate to {url}",
        type=IntentStepType.NAVIGATE,
        source_step_indices=indices,
        context={"url": url},
    )


PATTERN_BUILDERS: dict[FlowPatternType, PatternBuilder] = {
    FlowPatternType.WALLET_CONNECT: _connect_wallet,
    FlowPatternType.WALLET_SIGN: _sign_message,
    FlowPatternType.NETWORK_SWITCH: _switch_network,
    FlowPatternType.TRADE_OPEN: _confirm_transaction,
    FlowPatternType.TRADE_CLOSE: _confirm_transaction,
    FlowPatternType.WALLET_APPROVE: _confirm_transaction,
    FlowPatternType.FORM_FILL: _fill_form,
    FlowPatternType.NAVIGATION: _navigate,
}


def is_network_switch_click(text: str) -> bool:
    """Check if click text asks the dApp to switch networks."""
    if NETWORK_CLICK_PATTERN.search(text):
        return True
    lowered = text.lower()
    return any(name.lower() in lowered for name in CHAIN_ID_TO_NETWORK.values())


def is_wallet_selection_click(text: str) -> bool:
    """Check if click text belongs to a wallet connection flow."""
    return bool(WALLET_CLICK_PATTERN.match(text))


def _raw_intent(
    index: int,
    step: Step,
    has_network_switch: bool,
    has_wallet_connect: bool,
) -> Optional[IntentStep]:
    """Build an intent for a step no pattern covers, or None for noise."""
    if is_polling_call(step) or isinstance(step, ScrollStep):
        return None

    if isinstance(step, ClickStep):
        text = step.label
        # Wallet and network tools already handle these buttons
        if text and has_network_switch and is_network_switch_click(text):
            return None
        if text and has_wallet_connect and is_wallet_selection_click(text):
            return None
        return IntentStep(
            id=_UNASSIGNED,
            description=f'Click "{text}"' if text else "Click element",
            type=IntentStepType.CLICK_ELEMENT,
            source_step_indices=(index,),
            context={
                "selector": step.selector,
                "text": step.metadata.text,
                "test_id": step.metadata.test_id,
                "tag_name": step.metadata.tag_name,
            },
        )

    if isinstance(step, InputStep):
        return IntentStep(
            id=_UNASSIGNED,
            description=f'Type "{step.value}" into {step.metadata.placeholder or "input"}',
            type=IntentStepType.FILL_FORM,
            source_step_indices=(index,),
            context={"fields": collapse_form_fields([step])},
        )

    if isinstance(step, NavigationStep) and step.url:
        return IntentStep(
            id=_UNASSIGNED,
            description=f"Navigate to {step.url}",
            type=IntentStepType.NAVIGATE,
            source_step_indices=(index,),
            context={"url": step.url},
        )

    return None


def build_intent_steps(
    analysis: AnalysisResult,
    settings: Optional[AnalysisSettings] = None,
) -> list[IntentStep]:
    """Convert a recording analysis into ordered intent steps.

    Args:
        analysis: Result of analyze_recording
        settings: Analysis settings (defaults to get_settings())

    Returns:
        Intent steps in recording order, with ids ``step-1``, ``step-2``, ...
        A start-URL step comes first; connection tests end with a synthetic
        wallet verification step.
    """
    settings = settings or get_settings()
    recording = analysis.recording
    steps = recording.steps

    consumed: set[int] = set()
    claimed: set[int] = set()
    ordered: list[tuple[int, IntentStep]] = []

    for pattern in analysis.patterns:
        consumed.update(pattern.indices)
        # An index belongs to at most one pattern-derived intent
        indices = tuple(i for i in pattern.indices if i not in claimed)
        if not indices:
            continue
        builder = PATTERN_BUILDERS.get(pattern.type)
        intent = builder(pattern, indices, analysis, settings) if builder else None
        if intent is None:
            continue
        claimed.update(indices)
        ordered.append((min(indices), intent))

    has_network_switch = any(s.type == IntentStepType.SWITCH_NETWORK for _, s in ordered)
    has_wallet_connect = any(s.type == IntentStepType.CONNECT_WALLET for _, s in ordered)

    pattern_count = len(ordered)
    for index, step in enumerate(steps):
        if index in consumed:
            continue
        intent = _raw_intent(index, step, has_network_switch, has_wallet_connect)
        if intent is not None:
            ordered.append((index, intent))

    # Stable sort: ties keep pattern order
    ordered.sort(key=lambda item: item[0])
    plan = [intent for _, intent in ordered]

    if recording.start_url:
        if analysis.test_type == TestType.CONNECTION:
            description = f"Navigate to {recording.start_url}"
        else:
            description = f"Ensure page is at {recording.start_url}"
        plan.insert(0, IntentStep(
            id=_UNASSIGNED,
            description=description,
            type=IntentStepType.NAVIGATE,
            context={"url": recording.start_url},
        ))

    if analysis.test_type == TestType.CONNECTION:
        plan.append(IntentStep(
            id=_UNASSIGNED,
            description="Verify wallet is connected via ethereum provider",
            type=IntentStepType.VERIFY_STATE,
            context={"verification": "wallet_connected"},
        ))

    plan = [replace(intent, id=f"step-{n}") for n, intent in enumerate(plan, start=1)]

    logger.debug(
        "Intent steps built",
        recording=recording.name,
        pattern_steps=pattern_count,
        raw_steps=len(ordered) - pattern_count,
        total=len(plan),
    )
    return plan

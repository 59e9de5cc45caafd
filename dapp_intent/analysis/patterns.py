"""Flow pattern detection.

Each detector is a pure function over the step sequence that returns the
patterns it recognises. Detectors are independent of each other; the
results are combined by concatenation and a stable sort on start index.
Missing a pattern is a normal outcome, never an error.
"""

from collections.abc import Sequence

import structlog

from ..recording.models import ClickStep, InputStep, NavigationStep, Step, Web3Step
from .extractors import CHAIN_ID_METHOD, parse_hex_chain_id
from .models import FlowPattern, FlowPatternType

logger = structlog.get_logger()

REQUEST_ACCOUNTS_METHOD = "eth_requestAccounts"
SEND_TRANSACTION_METHOD = "eth_sendTransaction"

SIGN_METHODS = frozenset({
    "personal_sign",
    "eth_sign",
    "eth_signTypedData",
    "eth_signTypedData_v3",
    "eth_signTypedData_v4",
})
NETWORK_METHODS = frozenset({"wallet_switchEthereumChain", "wallet_addEthereumChain"})

CONNECT_CLICK_KEYWORDS = ("connect", "wallet", "login", "metamask", "rabby")
SIGN_CLICK_KEYWORDS = ("sign", "confirm", "agree")
TRADE_KEYWORDS = ("trade", "order", "place", "buy", "sell", "long", "short", "leverage")
CONFIRM_KEYWORDS = ("confirm", "submit", "execute")
APPROVE_KEYWORD = "approve"

CONNECT_LOOKBACK = 5
SIGN_LOOKBACK = 3
# Steps after the triggering click searched for a transaction
TRANSACTION_LOOKAHEAD = 4
MIN_FORM_INPUTS = 2

CONNECT_CONFIDENCE = 0.9
SIGN_CONFIDENCE = 0.95
EXPLICIT_SWITCH_CONFIDENCE = 0.95
IMPLICIT_SWITCH_CONFIDENCE = 0.8
TRADE_CONFIDENCE = 0.85
APPROVE_CONFIDENCE = 0.9
FORM_FILL_CONFIDENCE = 0.7
NAVIGATION_CONFIDENCE = 1.0


def is_call(step: Step, method: str) -> bool:
    return isinstance(step, Web3Step) and step.method == method


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def detect_wallet_connect(steps: Sequence[Step]) -> list[FlowPattern]:
    """Detect ``eth_requestAccounts`` calls and the clicks that led to them.

    Every click within the five preceding steps whose text looks like a
    connect or wallet-selection button joins the pattern; the pattern starts
    at the earliest one.
    """
    patterns = []
    for i, step in enumerate(steps):
        if not is_call(step, REQUEST_ACCOUNTS_METHOD):
            continue

        connect_steps = [step]
        start_index = i
        for j in range(i - 1, max(0, i - CONNECT_LOOKBACK) - 1, -1):
            prev = steps[j]
            if isinstance(prev, ClickStep) and _contains_any(
                prev.metadata.lower_text, CONNECT_CLICK_KEYWORDS
            ):
                connect_steps.insert(0, prev)
                start_index = j

        metadata = {}
        if step.provider is not None:
            metadata["wallet_name"] = step.provider.name

        patterns.append(FlowPattern(
            type=FlowPatternType.WALLET_CONNECT,
            start_index=start_index,
            end_index=i,
            steps=tuple(connect_steps),
            confidence=CONNECT_CONFIDENCE,
            metadata=metadata,
        ))
    return patterns


def detect_wallet_sign(steps: Sequence[Step]) -> list[FlowPattern]:
    """Detect signature requests and the nearest click that triggered them."""
    patterns = []
    for i, step in enumerate(steps):
        if not (isinstance(step, Web3Step) and step.method in SIGN_METHODS):
            continue

        start_index = i
        sign_steps = []
        for j in range(i - 1, max(0, i - SIGN_LOOKBACK) - 1, -1):
            prev = steps[j]
            if isinstance(prev, ClickStep) and _contains_any(
                prev.metadata.lower_text, SIGN_CLICK_KEYWORDS
            ):
                sign_steps.append(prev)
                start_index = j
                break
        sign_steps.append(step)

        patterns.append(FlowPattern(
            type=FlowPatternType.WALLET_SIGN,
            start_index=start_index,
            end_index=i,
            steps=tuple(sign_steps),
            confidence=SIGN_CONFIDENCE,
            metadata={"method": step.method},
        ))
    return patterns


def _requested_chain_id(step: Web3Step):
    params = step.params
    if isinstance(params, list) and params and isinstance(params[0], dict):
        return parse_hex_chain_id(params[0].get("chainId"))
    return None


def detect_network_switch(steps: Sequence[Step]) -> list[FlowPattern]:
    """Detect explicit and implicit network switches.

    Explicit switches are ``wallet_switchEthereumChain`` and
    ``wallet_addEthereumChain`` calls. Implicit switches are ``eth_chainId``
    string results that differ, as raw strings, from the previous
    ``eth_chainId`` result; they are dropped when an explicit switch to the
    same chain was already found.
    """
    explicit = []
    for i, step in enumerate(steps):
        if isinstance(step, Web3Step) and step.method in NETWORK_METHODS:
            explicit.append(FlowPattern(
                type=FlowPatternType.NETWORK_SWITCH,
                start_index=i,
                end_index=i,
                steps=(step,),
                confidence=EXPLICIT_SWITCH_CONFIDENCE,
                metadata={"chain_id": _requested_chain_id(step), "method": step.method},
            ))

    explicit_chains = {p.metadata["chain_id"] for p in explicit}
    implicit = []
    last_result = None
    for i, step in enumerate(steps):
        if not is_call(step, CHAIN_ID_METHOD) or not isinstance(step.result, str) or not step.result:
            continue
        # "0x1" then "0x01" counts as a change
        if last_result is not None and step.result != last_result:
            chain_id = parse_hex_chain_id(step.result)
            if chain_id is None or chain_id not in explicit_chains:
                implicit.append(FlowPattern(
                    type=FlowPatternType.NETWORK_SWITCH,
                    start_index=i,
                    end_index=i,
                    steps=(step,),
                    confidence=IMPLICIT_SWITCH_CONFIDENCE,
                    metadata={
                        "chain_id": chain_id,
                        "implicit": True,
                        "from_chain": parse_hex_chain_id(last_result),
                    },
                ))
        last_result = step.result

    return explicit + implicit


def _transaction_after(steps: Sequence[Step], i: int):
    for j in range(i + 1, min(len(steps), i + 1 + TRANSACTION_LOOKAHEAD)):
        if is_call(steps[j], SEND_TRANSACTION_METHOD):
            return j
    return None


def detect_trade_open(steps: Sequence[Step]) -> list[FlowPattern]:
    """Detect trade or confirm clicks followed closely by a transaction."""
    patterns = []
    for i, step in enumerate(steps):
        if not isinstance(step, ClickStep):
            continue
        text = step.metadata.lower_text
        test_id = step.metadata.lower_test_id
        is_trade = _contains_any(text, TRADE_KEYWORDS) or _contains_any(test_id, TRADE_KEYWORDS)
        is_confirm = _contains_any(text, CONFIRM_KEYWORDS) or _contains_any(test_id, CONFIRM_KEYWORDS)
        if not (is_trade or is_confirm):
            continue

        j = _transaction_after(steps, i)
        if j is None:
            continue
        patterns.append(FlowPattern(
            type=FlowPatternType.TRADE_OPEN,
            start_index=i,
            end_index=j,
            steps=tuple(steps[i:j + 1]),
            confidence=TRADE_CONFIDENCE,
        ))
    return patterns


def detect_wallet_approve(steps: Sequence[Step]) -> list[FlowPattern]:
    """Detect approve clicks followed closely by a transaction."""
    patterns = []
    for i, step in enumerate(steps):
        if not isinstance(step, ClickStep):
            continue
        if APPROVE_KEYWORD not in step.metadata.lower_text and APPROVE_KEYWORD not in step.metadata.lower_test_id:
            continue

        j = _transaction_after(steps, i)
        if j is None:
            continue
        patterns.append(FlowPattern(
            type=FlowPatternType.WALLET_APPROVE,
            start_index=i,
            end_index=j,
            steps=tuple(steps[i:j + 1]),
            confidence=APPROVE_CONFIDENCE,
        ))
    return patterns


def detect_form_fill(steps: Sequence[Step]) -> list[FlowPattern]:
    """Group runs of two or more consecutive input steps."""
    patterns = []
    run_start = None
    run = []

    def close_run(end_index: int):
        if len(run) >= MIN_FORM_INPUTS:
            patterns.append(FlowPattern(
                type=FlowPatternType.FORM_FILL,
                start_index=run_start,
                end_index=end_index,
                steps=tuple(run),
                confidence=FORM_FILL_CONFIDENCE,
            ))

    for i, step in enumerate(steps):
        if isinstance(step, InputStep):
            if run_start is None:
                run_start = i
            run.append(step)
        elif run_start is not None:
            close_run(i - 1)
            run_start = None
            run = []

    if run_start is not None:
        close_run(len(steps) - 1)
    return patterns


def detect_navigation(steps: Sequence[Step]) -> list[FlowPattern]:
    """Turn every navigation step into its own pattern."""
    return [
        FlowPattern(
            type=FlowPatternType.NAVIGATION,
            start_index=i,
            end_index=i,
            steps=(step,),
            confidence=NAVIGATION_CONFIDENCE,
            metadata={"url": step.url},
        )
        for i, step in enumerate(steps)
        if isinstance(step, NavigationStep)
    ]


DETECTORS = (
    detect_wallet_connect,
    detect_wallet_sign,
    detect_network_switch,
    detect_trade_open,
    detect_wallet_approve,
    detect_form_fill,
    detect_navigation,
)


def detect_patterns(steps: Sequence[Step]) -> list[FlowPattern]:
    """Run every detector and return the patterns sorted by start index."""
    patterns = []
    for detector in DETECTORS:
        found = detector(steps)
        if found:
            logger.debug("Patterns detected", detector=detector.__name__, count=len(found))
        patterns.extend(found)
    return sorted(patterns, key=lambda p: p.start_index)

"""Recording-level classification: test type and connection UI library."""

from collections.abc import Sequence

from ..recording.models import ClickStep, Step
from .models import DappConnectionPattern, FlowPattern, FlowPatternType, TestType
from .patterns import REQUEST_ACCOUNTS_METHOD, is_call

CONNECTION_CLICK_KEYWORDS = ("connect", "login", "sign in", "launch app", "enter app")


def classify_test_type(steps: Sequence[Step], wallet_connected: bool) -> TestType:
    """Decide whether a recording is a connection test or a flow test.

    A recording that started with the wallet connected and never requested
    accounts is a flow test. A recording without an accounts request and
    without any connect-looking click is also treated as a flow test: the
    recorder most likely missed the provider, and nothing in the session
    looks like a connection. Everything else is a connection test.
    """
    has_request_accounts = any(is_call(s, REQUEST_ACCOUNTS_METHOD) for s in steps)

    if wallet_connected and not has_request_accounts:
        return TestType.FLOW

    if not has_request_accounts:
        has_connection_clicks = any(
            isinstance(s, ClickStep)
            and any(kw in s.metadata.lower_text for kw in CONNECTION_CLICK_KEYWORDS)
            for s in steps
        )
        if not has_connection_clicks:
            return TestType.FLOW

    return TestType.CONNECTION


def _is_privy(selector: str, test_id: str, class_name: str, text: str) -> bool:
    return (
        "privy-" in selector
        or "#privy-modal-content" in selector
        or "#privy-dialog" in selector
        or "login-button" in test_id
        or "privy" in class_name
        or "continue with a wallet" in text
    )


def _is_rainbowkit(selector: str, test_id: str, class_name: str) -> bool:
    return (
        "rk-" in selector
        or "rk-" in test_id
        or "rk-" in class_name
        or "rainbowkit" in selector
    )


def _is_web3modal(selector: str, test_id: str, text: str) -> bool:
    return (
        "w3m-" in selector
        or "w3m-" in test_id
        or "web3modal" in selector
        or "walletconnect" in text
    )


def detect_connection_pattern(
    steps: Sequence[Step],
    patterns: Sequence[FlowPattern],
) -> DappConnectionPattern:
    """Identify the wallet-connection UI library from click signatures.

    The first click matching any library wins; libraries are checked in the
    order Privy, RainbowKit, Web3Modal. Without a signature match, a
    detected wallet connection means a custom connect flow.
    """
    for step in steps:
        if not isinstance(step, ClickStep):
            continue
        selector = step.selector
        test_id = step.metadata.test_id or ""
        class_name = step.metadata.class_name or ""
        text = step.metadata.lower_text

        if _is_privy(selector, test_id, class_name, text):
            return DappConnectionPattern.PRIVY
        if _is_rainbowkit(selector, test_id, class_name):
            return DappConnectionPattern.RAINBOWKIT
        if _is_web3modal(selector, test_id, text):
            return DappConnectionPattern.WEB3MODAL

    if any(p.type == FlowPatternType.WALLET_CONNECT for p in patterns):
        return DappConnectionPattern.CUSTOM
    return DappConnectionPattern.UNKNOWN

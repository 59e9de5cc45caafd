"""Shared fixtures for recording analysis tests."""

import os

import pytest

from dapp_intent.config import AnalysisSettings
from dapp_intent.recording.models import Recording


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep local DAPP_INTENT_* variables from leaking into tests."""
    for key in list(os.environ):
        if key.startswith("DAPP_INTENT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Default analysis settings."""
    return AnalysisSettings(_env_file=None)


@pytest.fixture
def click():
    """Factory for click step dicts in recorder wire format."""
    def _click(text=None, selector="button", test_id=None, aria_label=None,
               class_name=None, timestamp=None):
        metadata = {}
        if text is not None:
            metadata["text"] = text
        if test_id is not None:
            metadata["dataTestId"] = test_id
        if aria_label is not None:
            metadata["ariaLabel"] = aria_label
        if class_name is not None:
            metadata["className"] = class_name
        step = {"type": "click", "selector": selector}
        if metadata:
            step["metadata"] = metadata
        if timestamp is not None:
            step["timestamp"] = timestamp
        return step
    return _click


@pytest.fixture
def type_into():
    """Factory for input step dicts."""
    def _input(selector, value, placeholder=None, test_id=None, timestamp=None):
        step = {"type": "input", "selector": selector, "value": value}
        metadata = {}
        if placeholder is not None:
            metadata["placeholder"] = placeholder
        if test_id is not None:
            metadata["dataTestId"] = test_id
        if metadata:
            step["metadata"] = metadata
        if timestamp is not None:
            step["timestamp"] = timestamp
        return step
    return _input


@pytest.fixture
def web3():
    """Factory for wallet-provider call step dicts."""
    def _web3(method, params=None, result=None, chain_id=None, provider=None, timestamp=None):
        step = {"type": "web3", "web3Method": method}
        if params is not None:
            step["web3Params"] = params
        if result is not None:
            step["web3Result"] = result
        if chain_id is not None:
            step["chainId"] = chain_id
        if provider is not None:
            step["web3ProviderInfo"] = {"name": provider}
        if timestamp is not None:
            step["timestamp"] = timestamp
        return step
    return _web3


@pytest.fixture
def navigate():
    """Factory for navigation step dicts."""
    def _navigate(url, timestamp=None):
        step = {"type": "navigation", "url": url}
        if timestamp is not None:
            step["timestamp"] = timestamp
        return step
    return _navigate


@pytest.fixture
def scroll():
    """Factory for scroll step dicts."""
    def _scroll(x=0, y=500, timestamp=None):
        step = {"type": "scroll", "scrollX": x, "scrollY": y}
        if timestamp is not None:
            step["timestamp"] = timestamp
        return step
    return _scroll


@pytest.fixture
def make_recording():
    """Build a Recording from step dicts.

    Steps get sequential ids and, unless given, timestamps one second apart.
    """
    def _make(steps, wallet_connected=False, start_url="https://app.example.com",
              name="test-recording", **extra):
        wire_steps = []
        for i, step in enumerate(steps):
            wire = {"id": f"s{i}", "timestamp": 1000 * i, **step}
            wire_steps.append(wire)
        data = {
            "name": name,
            "startUrl": start_url,
            "steps": wire_steps,
            "walletConnected": wallet_connected,
            **extra,
        }
        return Recording.from_dict(data)
    return _make


@pytest.fixture
def trading_recording(make_recording, click, type_into, web3, navigate, scroll):
    """A realistic perpetuals-trading session on Base."""
    return make_recording([
        web3("eth_chainId", result="0x1"),
        click("Login"),
        click("Continue with a wallet", selector="#privy-modal-content button"),
        click("MetaMask"),
        web3("eth_requestAccounts", result=["0xabc"], provider="MetaMask"),
        web3("eth_accounts", result=["0xabc"]),
        web3("wallet_switchEthereumChain", params=[{"chainId": "0x2105"}]),
        web3("eth_chainId", result="0x2105"),
        click("Switch to Base"),
        scroll(),
        type_into('[data-testid="collateral-input"]', "1"),
        type_into('[data-testid="collateral-input"]', "10"),
        type_into('[data-testid="leverage-input"]', "7"),
        type_into('[data-testid="leverage-input"]', "100"),
        click("Place Order", test_id="place-order"),
        web3("eth_sendTransaction", params=[{"to": "0xdef"}]),
        navigate("https://app.example.com/portfolio"),
    ], name="avantis-trade")

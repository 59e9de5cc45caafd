"""Chain and wallet extraction from wallet-provider calls."""

from collections.abc import Sequence
from typing import Any, Optional

from ..recording.models import Step, Web3Step

CHAIN_ID_METHOD = "eth_chainId"

CHAIN_ID_TO_NETWORK = {
    1: "Ethereum Mainnet",
    8453: "Base",
    42161: "Arbitrum One",
    10: "OP Mainnet",
    137: "Polygon Mainnet",
    43114: "Avalanche Network C-Chain",
    56: "BNB Smart Chain",
}


def parse_chain_id(value: Any) -> Optional[int]:
    """Decode a chain id given as a hex string, decimal string or integer.

    Returns None for anything that does not decode to a positive integer.
    """
    return _decode_chain_id(value, hex_only=False)


def parse_hex_chain_id(value: Any) -> Optional[int]:
    """Decode a chain id that is always hex, with or without the ``0x`` prefix.

    Wallet RPC parameters and ``eth_chainId`` results are hex quantities,
    so ``"2105"`` here means chain 8453.
    """
    return _decode_chain_id(value, hex_only=True)


def _decode_chain_id(value: Any, hex_only: bool) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None

    text = value.strip().lower()
    is_hex = text.startswith("0x")
    if is_hex:
        text = text[2:]
    try:
        chain_id = int(text, 16 if is_hex or hex_only else 10)
    except ValueError:
        return None
    return chain_id if chain_id > 0 else None


def network_name(chain_id: Optional[int]) -> Optional[str]:
    """Human-readable network name for a known chain id."""
    if chain_id is None:
        return None
    return CHAIN_ID_TO_NETWORK.get(chain_id)


def extract_chain_id(steps: Sequence[Step]) -> Optional[int]:
    """Return the first chain id seen in the recording.

    Looks at wallet-provider calls in order and takes either the explicit
    ``chainId`` captured with the call or the decoded result of an
    ``eth_chainId`` query, whichever comes first.
    """
    for step in steps:
        if not isinstance(step, Web3Step):
            continue
        if step.chain_id:
            return step.chain_id
        if step.method == CHAIN_ID_METHOD and step.result:
            chain_id = parse_chain_id(step.result)
            if chain_id is not None:
                return chain_id
    return None


def extract_wallet_name(steps: Sequence[Step]) -> Optional[str]:
    """Return the name of the first wallet provider that identified itself."""
    for step in steps:
        if isinstance(step, Web3Step) and step.provider is not None:
            return step.provider.name
    return None

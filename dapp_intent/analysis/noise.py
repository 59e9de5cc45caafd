"""Classification of background wallet-provider traffic.

dApps poll the provider constantly (chain id, accounts, balances). These
calls are not user actions, so the intent synthesizer drops them and prompt
builders collapse them to a single occurrence.
"""

from collections.abc import Sequence

from ..recording.models import ClickStep, InputStep, Step, Web3Step

POLLING_METHODS = frozenset({
    "eth_chainId",
    "eth_accounts",
    "eth_blockNumber",
    "eth_getBalance",
    "eth_call",
    "net_version",
})

REMOVED_PLACEHOLDER = "[removed]"


def is_polling_call(step: Step) -> bool:
    """Check if a step is a background polling call to the provider."""
    return isinstance(step, Web3Step) and step.method in POLLING_METHODS


def compact_steps_for_prompt(steps: Sequence[Step]) -> list[dict]:
    """Serialise steps for an LLM prompt without repeated polling or media.

    The first call of each polling method is kept and later ones dropped.
    Screenshots are removed and provider icons replaced, since both are
    large base64 payloads.
    """
    seen_polling = set()
    compacted = []
    for step in steps:
        if is_polling_call(step):
            if step.method in seen_polling:
                continue
            seen_polling.add(step.method)

        data = step.to_dict()
        if isinstance(step, (ClickStep, InputStep, Web3Step)):
            data.pop("screenshot", None)
        provider = data.get("web3ProviderInfo")
        if provider and provider.get("icon"):
            data["web3ProviderInfo"] = {**provider, "icon": REMOVED_PLACEHOLDER}
        compacted.append(data)
    return compacted

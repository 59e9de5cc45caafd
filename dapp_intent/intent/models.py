"""Intent steps - the semantic plan handed to code generation and agents."""

from dataclasses import dataclass, field
from enum import Enum


class IntentStepType(str, Enum):
    """Categories of intent steps."""

    NAVIGATE = "navigate"
    CONNECT_WALLET = "connect_wallet"
    SIGN_MESSAGE = "sign_message"
    SWITCH_NETWORK = "switch_network"
    CONFIRM_TRANSACTION = "confirm_transaction"
    FILL_FORM = "fill_form"
    CLICK_ELEMENT = "click_element"
    VERIFY_STATE = "verify_state"


@dataclass(frozen=True)
class IntentStep:
    """One unit of user intent.

    ``source_step_indices`` lists the recording steps the intent was derived
    from; it is empty for synthetic steps such as the final verification.
    """

    id: str
    description: str
    type: IntentStepType
    source_step_indices: tuple[int, ...] = ()
    context: dict = field(default_factory=dict)

    @property
    def is_synthetic(self) -> bool:
        return not self.source_step_indices

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "type": self.type.value,
            "source_step_indices": list(self.source_step_indices),
            "context": dict(self.context),
        }

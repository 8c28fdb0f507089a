# storefront/domain/checkout.py
from enum import Enum
from typing import Optional

from storefront.domain.errors import ErrorCode
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    EDITING = "EDITING"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


_ALLOWED = {
    CheckoutState.EDITING: {CheckoutState.VALIDATING},
    CheckoutState.VALIDATING: {CheckoutState.SUBMITTING, CheckoutState.FAILED},
    CheckoutState.SUBMITTING: {CheckoutState.SUCCEEDED, CheckoutState.FAILED},
    CheckoutState.SUCCEEDED: set(),
    CheckoutState.FAILED: {CheckoutState.EDITING},
}


class IllegalTransition(RuntimeError):
    pass


class CheckoutAttempt:
    """
    Editing -> Validating -> Submitting -> Succeeded | Failed(reason).
    Succeeded is terminal, Failed only goes back to Editing.
    """

    def __init__(self, user_id: int):
        self.user_id = user_id
        self.state = CheckoutState.EDITING
        self.reason: Optional[ErrorCode] = None
        self.order_id: Optional[int] = None

    def _move(self, target: CheckoutState) -> None:
        if target not in _ALLOWED[self.state]:
            raise IllegalTransition(f"Checkout cannot go from {self.state.value} to {target.value}")
        logger.info(f"Checkout of user {self.user_id}: {self.state.value} -> {target.value}")
        self.state = target

    def validate(self) -> None:
        self._move(CheckoutState.VALIDATING)

    def submit(self) -> None:
        self._move(CheckoutState.SUBMITTING)

    def succeed(self, order_id: int) -> None:
        self._move(CheckoutState.SUCCEEDED)
        self.order_id = order_id

    def fail(self, reason: ErrorCode) -> None:
        self._move(CheckoutState.FAILED)
        self.reason = reason

    def edit(self) -> None:
        self._move(CheckoutState.EDITING)
        self.reason = None

    @property
    def finished(self) -> bool:
        return self.state in (CheckoutState.SUCCEEDED, CheckoutState.FAILED)

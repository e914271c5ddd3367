"""Issues order status changes on behalf of staff."""

import logging
from dataclasses import dataclass
from enum import Enum

from bar_ordering_client.errors import BackendError
from bar_ordering_client.observability.metrics import record_status_transition
from bar_ordering_client.services.order_feed import OrderFeed
from bar_ordering_client.services.order_service_client import OrderServiceClient

logger = logging.getLogger(__name__)


class StatusFailureMode(str, Enum):
    """How a rejected or unreachable status change is reported."""

    SURFACE_ERROR = "surface_error"
    LOCAL_DEMO = "local_demo"


@dataclass
class TransitionResult:
    """Result of a status change request.

    Attributes:
        success: Whether the change is shown as done
        order_id: Order that was targeted
        target_status: Requested status
        applied_locally: True when only the local snapshot was patched
        error_message: Backend failure, also kept when applied locally
    """

    success: bool
    order_id: int
    target_status: str
    applied_locally: bool = False
    error_message: str | None = None


class StatusTransitionService:
    """Sends status changes and keeps the staff feed in step.

    Transitions are not checked against the order's current status; the
    backend accepts or rejects them. A successful change triggers a full feed
    refresh rather than a local patch.
    """

    def __init__(
        self,
        order_client: OrderServiceClient,
        feed: OrderFeed,
        failure_mode: StatusFailureMode = StatusFailureMode.SURFACE_ERROR,
    ) -> None:
        """Initialize the transition service.

        Args:
            order_client: Client for the order endpoints
            feed: Feed refreshed after every accepted change
            failure_mode: Report failures, or patch the local copy in demo mode
        """
        self.order_client = order_client
        self.feed = feed
        self.failure_mode = failure_mode

    async def change_status(self, order_id: int, status: str) -> TransitionResult:
        """Move an order to ``status``.

        Args:
            order_id: Order to update
            status: Target status name

        Returns:
            TransitionResult; backend failures never raise
        """
        target = status.strip().upper()

        try:
            await self.order_client.change_status(order_id, target)
        except BackendError as e:
            return self._handle_failure(order_id, target, e)

        record_status_transition(target, "accepted")
        await self.feed.refresh()
        return TransitionResult(success=True, order_id=order_id, target_status=target)

    def _handle_failure(self, order_id: int, target: str, error: BackendError) -> TransitionResult:
        message = str(error) or type(error).__name__

        if self.failure_mode is StatusFailureMode.LOCAL_DEMO:
            logger.warning(
                f"Status change of order {order_id} to {target} failed, applying locally: {message}"
            )
            self.feed.apply_local_status(order_id, target)
            record_status_transition(target, "applied_locally")
            return TransitionResult(
                success=True,
                order_id=order_id,
                target_status=target,
                applied_locally=True,
                error_message=message,
            )

        logger.error(f"Status change of order {order_id} to {target} failed: {message}")
        record_status_transition(target, "failed")
        return TransitionResult(
            success=False,
            order_id=order_id,
            target_status=target,
            error_message=message,
        )

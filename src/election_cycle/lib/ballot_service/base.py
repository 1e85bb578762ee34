"""Abstract interfaces for the external ballot service and token ledger.

The state machine never talks to the network directly: it receives an
``ExternalServices`` bundle and calls the methods below, each exactly once per
logical event.  Production code wires in the httpx clients; tests wire in
recording fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


class ExternalServiceError(Exception):
    """Raised when an outbound call to the ballot service or ledger fails.

    Args:
        service_name: Name of the failing service.
        message: Human-readable error description.
        status_code: Optional HTTP status code returned by the service.
    """

    def __init__(self, service_name: str, message: str, status_code: int | None = None) -> None:
        self.service_name = service_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service_name}: {message}")


class BaseBallotService(ABC):
    """Outbound operations on the external ballot/voting service."""

    @abstractmethod
    async def register_voter(self, voter: str, treasury_symbol: str, referrer: str) -> None:
        """Enroll ``voter`` in the treasury so their stake can weigh votes."""

    @abstractmethod
    async def create_ballot(
        self,
        ballot_id: int,
        *,
        category: str,
        publisher: str,
        treasury_symbol: str,
        voting_method: str,
        options: list[str],
    ) -> None:
        """Create ballot ``ballot_id`` with one option per accepted nominee."""

    @abstractmethod
    async def set_ballot_details(self, ballot_id: int, title: str, description: str, content: str) -> None:
        """Publish the cycle's title, description and content on the ballot."""

    @abstractmethod
    async def set_weighting_mode(self, ballot_id: int, mode: str) -> None:
        """Toggle how votes on the ballot are weighted."""

    @abstractmethod
    async def open_voting(self, ballot_id: int, end_time: datetime) -> None:
        """Open the ballot for voting until ``end_time``."""

    @abstractmethod
    async def synchronize_voter(self, voter: str) -> None:
        """Reconcile ``voter``'s voting weight with their current stake."""

    @abstractmethod
    async def rebalance_ballot(self, voter: str, ballot_id: int, worker: str) -> None:
        """Reapply ``voter``'s synchronized weight to ballot ``ballot_id``."""

    @abstractmethod
    async def close_voting(self, ballot_id: int, *, broadcast: bool = False) -> None:
        """Close the ballot."""

    async def close(self) -> None:  # noqa: B027
        """Release any underlying resources."""


class BaseLedger(ABC):
    """Outbound operations on the token ledger."""

    @abstractmethod
    async def pay_fixed_fee(self, recipient: str, amount: Decimal, symbol: str, memo: str) -> None:
        """Transfer a fixed fee to ``recipient``."""

    async def close(self) -> None:  # noqa: B027
        """Release any underlying resources."""


@dataclass(frozen=True)
class ExternalServices:
    """The collaborators a state-machine step may call out to."""

    ballots: BaseBallotService
    ledger: BaseLedger

    async def close(self) -> None:
        await self.ballots.close()
        await self.ledger.close()

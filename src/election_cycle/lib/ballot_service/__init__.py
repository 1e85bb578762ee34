"""External ballot service and ledger clients.

Public API:
    - BaseBallotService / BaseLedger: Injected capability interfaces
    - ExternalServices: Bundle passed to every state-machine step
    - HttpBallotService / HttpLedger: httpx implementations
    - ExternalServiceError: Transport/HTTP failure of an outbound call
    - build_external_services: Construct the HTTP bundle from settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from election_cycle.lib.ballot_service.base import (
    BaseBallotService,
    BaseLedger,
    ExternalServiceError,
    ExternalServices,
)
from election_cycle.lib.ballot_service.http import HttpBallotService, HttpLedger

if TYPE_CHECKING:
    from election_cycle.core.config import Settings


def build_external_services(settings: Settings) -> ExternalServices:
    """Create HTTP clients for the configured ballot service and ledger."""
    return ExternalServices(
        ballots=HttpBallotService(settings.ballot_service_url, timeout=settings.ballot_service_timeout),
        ledger=HttpLedger(
            settings.ledger_url,
            sender=settings.operator_identity,
            timeout=settings.ledger_timeout,
        ),
    )


__all__ = [
    "BaseBallotService",
    "BaseLedger",
    "ExternalServiceError",
    "ExternalServices",
    "HttpBallotService",
    "HttpLedger",
    "build_external_services",
]

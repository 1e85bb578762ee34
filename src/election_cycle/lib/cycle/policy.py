"""Tunable constants of an election cycle."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from election_cycle.core.config import Settings

NOMINATION_COUNT_CEILING = 255
MIN_BALLOT_OPTIONS = 2


@dataclass(frozen=True)
class CyclePolicy:
    """Identities, ballot shape, fee and work caps used by the state machine.

    Defaults match a stock deployment; ``from_settings`` projects the
    environment configuration onto this shape.
    """

    operator: str = "election"
    treasury_symbol: str = "8,VOTE"
    ballot_category: str = "election"
    voting_method: str = "1token1vote"
    weighting_mode: str = "votestake"
    fee_recipient: str = "decide"
    fee_amount: Decimal = Decimal("30.00000000")
    fee_symbol: str = "WAX"
    fee_memo: str = "Ballot Fee Payment"
    sync_batch_size: int = 100
    cleanup_batch_size: int = 200
    purge_threshold: int = 200
    self_accept_limit: int = 150
    min_ballot_options: int = MIN_BALLOT_OPTIONS
    nomination_ceiling: int = NOMINATION_COUNT_CEILING

    @classmethod
    def from_settings(cls, settings: Settings) -> CyclePolicy:
        return cls(
            operator=settings.operator_identity,
            treasury_symbol=settings.treasury_symbol,
            ballot_category=settings.ballot_category,
            voting_method=settings.voting_method,
            weighting_mode=settings.weighting_mode,
            fee_recipient=settings.ballot_fee_recipient,
            fee_amount=settings.ballot_fee_amount,
            fee_symbol=settings.ballot_fee_symbol,
            fee_memo=settings.ballot_fee_memo,
            sync_batch_size=settings.sync_batch_size,
            cleanup_batch_size=settings.cleanup_batch_size,
            purge_threshold=settings.nomination_purge_threshold,
            self_accept_limit=settings.self_nomination_accept_limit,
        )

"""HTTP clients for the ballot service and token ledger.

Both services expose one JSON ``POST /actions/{name}`` endpoint per action.
Calls are never retried: a failed call surfaces as ``ExternalServiceError`` so
the surrounding unit of work is rolled back.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import httpx
from loguru import logger

from election_cycle.lib.ballot_service.base import BaseBallotService, BaseLedger, ExternalServiceError


class _ActionClient:
    """Posts named actions to a JSON endpoint."""

    def __init__(self, service_name: str, base_url: str, timeout: float, client: httpx.AsyncClient | None) -> None:
        self._service_name = service_name
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def send(self, action: str, payload: dict[str, Any]) -> None:
        logger.debug("{} <- {} {}", self._service_name, action, payload)
        try:
            response = await self._client.post(f"/actions/{action}", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"Timeout calling {action}"
            logger.error("{}: {}", self._service_name, msg)
            raise ExternalServiceError(self._service_name, msg) from exc
        except httpx.HTTPStatusError as exc:
            msg = f"HTTP {exc.response.status_code} calling {action}"
            logger.error("{}: {}", self._service_name, msg)
            raise ExternalServiceError(self._service_name, msg, status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            msg = f"HTTP error calling {action}: {exc}"
            logger.error("{}: {}", self._service_name, msg)
            raise ExternalServiceError(self._service_name, msg) from exc

    async def close(self) -> None:
        await self._client.aclose()


def _timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S")


class HttpBallotService(BaseBallotService):
    """Ballot service client.

    Args:
        base_url: Service base URL.
        timeout: Request timeout in seconds.
        client: Optional preconfigured client (tests inject a MockTransport).
    """

    def __init__(self, base_url: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self._actions = _ActionClient("ballot_service", base_url, timeout, client)

    async def register_voter(self, voter: str, treasury_symbol: str, referrer: str) -> None:
        await self._actions.send(
            "regvoter",
            {"voter": voter, "treasury_symbol": treasury_symbol, "referrer": referrer},
        )

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
        await self._actions.send(
            "newballot",
            {
                "ballot": ballot_id,
                "category": category,
                "publisher": publisher,
                "treasury_symbol": treasury_symbol,
                "voting_method": voting_method,
                "initial_options": options,
            },
        )

    async def set_ballot_details(self, ballot_id: int, title: str, description: str, content: str) -> None:
        await self._actions.send(
            "editdetails",
            {"ballot": ballot_id, "title": title, "description": description, "content": content},
        )

    async def set_weighting_mode(self, ballot_id: int, mode: str) -> None:
        await self._actions.send("togglebal", {"ballot": ballot_id, "toggle": mode})

    async def open_voting(self, ballot_id: int, end_time: datetime) -> None:
        await self._actions.send("openvoting", {"ballot": ballot_id, "end_time": _timestamp(end_time)})

    async def synchronize_voter(self, voter: str) -> None:
        await self._actions.send("sync", {"voter": voter})

    async def rebalance_ballot(self, voter: str, ballot_id: int, worker: str) -> None:
        await self._actions.send("rebalance", {"voter": voter, "ballot": ballot_id, "worker": worker})

    async def close_voting(self, ballot_id: int, *, broadcast: bool = False) -> None:
        await self._actions.send("closevoting", {"ballot": ballot_id, "broadcast": broadcast})

    async def close(self) -> None:
        await self._actions.close()


class HttpLedger(BaseLedger):
    """Token ledger client paying fees on behalf of ``sender``."""

    def __init__(
        self,
        base_url: str,
        sender: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._sender = sender
        self._actions = _ActionClient("ledger", base_url, timeout, client)

    async def pay_fixed_fee(self, recipient: str, amount: Decimal, symbol: str, memo: str) -> None:
        await self._actions.send(
            "transfer",
            {
                "from": self._sender,
                "to": recipient,
                "quantity": f"{amount} {symbol}",
                "memo": memo,
            },
        )

    async def close(self) -> None:
        await self._actions.close()

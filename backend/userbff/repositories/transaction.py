from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

import httpx

from userbff.db.store import (
    BEGIN_TRANSACTION,
    COMMIT_TRANSACTION,
    ROLLBACK_TRANSACTION,
    RemoteStoreClient,
    StoreTransportError,
)
from userbff.repositories.errors import DatabaseError, TransactionIndeterminateError

logger = logging.getLogger(__name__)

Mutation = Callable[[str], Awaitable[httpx.Response]]


class TransactionState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    INDETERMINATE = "indeterminate"


class Transaction:
    """A single begin/commit/rollback sequence on the remote store.

    Each instance drives exactly one mutation. The handle returned by
    ``begin_transaction`` is dropped once the transaction reaches a terminal
    state, so an instance cannot be reused.
    """

    def __init__(self, store: RemoteStoreClient, operation: str) -> None:
        self._store = store
        self.operation = operation
        self.state = TransactionState.IDLE
        self.transaction_id: str | None = None

    async def run(self, mutate: Mutation) -> httpx.Response:
        """Open the transaction, apply ``mutate`` and settle it.

        Returns the successful mutation response after commit. A failed
        mutation is rolled back on a best-effort basis and re-raised as
        ``DatabaseError``. Anything else that interrupts the mutation,
        cancellation included, still rolls back and propagates unchanged.
        """
        transaction_id = await self.begin()
        try:
            response = await mutate(transaction_id)
        except StoreTransportError as exc:
            logger.warning("%s failed in transaction %s: %s", self.operation, transaction_id, exc)
            await self.rollback()
            raise DatabaseError(f"{self.operation} failed: {exc}") from exc
        except BaseException:
            if self.state is TransactionState.OPEN:
                logger.warning(
                    "%s interrupted in transaction %s, rolling back",
                    self.operation,
                    transaction_id,
                )
                await asyncio.shield(self.rollback())
            raise

        if not response.is_success:
            logger.warning(
                "%s rejected in transaction %s with status %s",
                self.operation,
                transaction_id,
                response.status_code,
            )
            await self.rollback()
            raise DatabaseError(
                f"{self.operation} failed. Status: {response.status_code}. "
                f"Response: {response.text}"
            )

        await self.commit()
        return response

    async def begin(self) -> str:
        if self.state is not TransactionState.IDLE:
            raise RuntimeError(f"Transaction already {self.state.value}")
        try:
            response = await self._store.rpc(BEGIN_TRANSACTION, {})
        except StoreTransportError as exc:
            raise DatabaseError(f"Failed to start transaction: {exc}") from exc
        if not response.is_success:
            raise DatabaseError(
                f"Failed to start transaction. Status: {response.status_code}"
            )

        self.transaction_id = _parse_transaction_id(response)
        self.state = TransactionState.OPEN
        logger.debug("Opened transaction %s for %s", self.transaction_id, self.operation)
        return self.transaction_id

    async def commit(self) -> None:
        transaction_id = self._require_open()
        try:
            response = await self._store.rpc(
                COMMIT_TRANSACTION, {"transaction_id": transaction_id}
            )
        except StoreTransportError as exc:
            self._settle(TransactionState.INDETERMINATE)
            logger.error(
                "Commit of transaction %s (%s) failed after the mutation was applied: %s",
                transaction_id,
                self.operation,
                exc,
            )
            raise TransactionIndeterminateError(
                f"Failed to commit transaction: {exc}", transaction_id
            ) from exc

        if not response.is_success:
            self._settle(TransactionState.INDETERMINATE)
            logger.error(
                "Commit of transaction %s (%s) rejected with status %s",
                transaction_id,
                self.operation,
                response.status_code,
            )
            raise TransactionIndeterminateError(
                f"Failed to commit transaction. Status: {response.status_code}",
                transaction_id,
            )

        self._settle(TransactionState.COMMITTED)
        logger.info("Committed transaction %s for %s", transaction_id, self.operation)

    async def rollback(self) -> bool:
        """Ask the store to discard the open transaction.

        Never raises for a remote failure; the outcome is logged and returned
        so it cannot mask the error that triggered the rollback.
        """
        transaction_id = self._require_open()
        self._settle(TransactionState.ROLLED_BACK)
        try:
            response = await self._store.rpc(
                ROLLBACK_TRANSACTION, {"transaction_id": transaction_id}
            )
        except StoreTransportError as exc:
            logger.warning(
                "Rollback of transaction %s (%s) failed: %s",
                transaction_id,
                self.operation,
                exc,
            )
            return False

        if not response.is_success:
            logger.warning(
                "Rollback of transaction %s (%s) rejected with status %s",
                transaction_id,
                self.operation,
                response.status_code,
            )
            return False

        logger.info("Rolled back transaction %s for %s", transaction_id, self.operation)
        return True

    def _require_open(self) -> str:
        if self.state is not TransactionState.OPEN or self.transaction_id is None:
            raise RuntimeError(f"Transaction is {self.state.value}, not open")
        return self.transaction_id

    def _settle(self, state: TransactionState) -> None:
        self.state = state
        self.transaction_id = None


def _parse_transaction_id(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError as exc:
        raise DatabaseError(f"Failed to parse transaction response: {exc}") from exc

    transaction_id = payload.get("transaction_id") if isinstance(payload, dict) else payload
    if not isinstance(transaction_id, str) or not transaction_id:
        raise DatabaseError("Failed to get transaction ID")
    return transaction_id

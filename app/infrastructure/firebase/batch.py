"""Batch write queue: many independent writes committed all-or-nothing.

A batch is not a transaction: nothing is read, nothing is isolated from
concurrent writers, and a failed commit is not retried. Use it for bulk,
independent writes only. One queue per bulk operation; never share an
instance across requests.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

from app.domain.exceptions import (
    BatchAlreadyActiveException,
    BatchCommitFailedException,
    BatchSizeExceededException,
    NoActiveBatchException,
)
from app.infrastructure.firebase._rest_client import DocumentReference, FirestoreRESTClient
from app.infrastructure.firebase._rest_encoding import (
    SERVER_TIMESTAMP,
    encode_delete,
    encode_write,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPERATIONS = 400


@dataclass(frozen=True)
class BatchOperation:
    """One queued write, as reported back on commit failure."""

    type: str
    collection: str
    doc_id: str
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class BatchResult:
    operations_count: int
    duration_ms: float


class BatchWriteQueue:
    """Queue of up to ``max_operations`` writes sent in one documents:commit."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        max_operations: int = DEFAULT_MAX_OPERATIONS,
    ) -> None:
        self._client = client
        self.max_operations = max_operations
        self._operations: list[BatchOperation] = []
        self._writes: list[dict] = []
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def operations(self) -> list[BatchOperation]:
        """Snapshot of the queued operations."""
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def start_batch(self) -> None:
        """Open a new batch. Batches do not nest."""
        if self._active:
            raise BatchAlreadyActiveException(len(self._operations))
        self._reset()
        self._active = True

    def create(
        self,
        collection: str,
        doc_id: str | None,
        data: dict[str, Any],
    ) -> BatchOperation:
        """Queue a create (fails the whole commit if the document exists).

        Without ``doc_id`` a new id is generated; read it from the returned
        operation.
        """
        ref = self._ref(collection, doc_id)
        write = encode_write(ref.name, {**data, "createdAt": SERVER_TIMESTAMP}, "create")
        return self._enqueue(BatchOperation("create", collection, ref.id, data), write)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> BatchOperation:
        """Queue a field update (fails the whole commit if the document is missing)."""
        ref = self._ref(collection, doc_id)
        write = encode_write(ref.name, {**data, "updatedAt": SERVER_TIMESTAMP}, "update")
        return self._enqueue(BatchOperation("update", collection, ref.id, data), write)

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> BatchOperation:
        """Queue a create-or-overwrite."""
        ref = self._ref(collection, doc_id)
        write = encode_write(ref.name, {**data, "updatedAt": SERVER_TIMESTAMP}, "set")
        return self._enqueue(BatchOperation("set", collection, ref.id, data), write)

    def delete(self, collection: str, doc_id: str) -> BatchOperation:
        ref = self._ref(collection, doc_id)
        return self._enqueue(
            BatchOperation("delete", collection, ref.id), encode_delete(ref.name)
        )

    async def commit(self) -> BatchResult:
        """Send every queued write atomically and close the batch.

        Raises:
            NoActiveBatchException: If no batch is open.
            BatchCommitFailedException: If the store rejected the commit; none
                of the writes were applied and the queue is reset.
        """
        if not self._active:
            raise NoActiveBatchException()
        operations = list(self._operations)
        writes = list(self._writes)
        self._reset()

        started = time.perf_counter()
        if writes:
            try:
                await self._client.commit(writes)
            except Exception as exc:
                logger.error(
                    "Batch commit of %d operations failed: %s", len(operations), exc
                )
                raise BatchCommitFailedException(exc, operations) from exc
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Batch committed: %d operations in %.1fms", len(operations), duration_ms
        )
        return BatchResult(operations_count=len(operations), duration_ms=duration_ms)

    def rollback(self) -> None:
        """Discard queued operations without touching the store."""
        if self._operations:
            logger.info("Batch rolled back: %d operations discarded", len(self._operations))
        self._reset()

    def _ref(self, collection: str, doc_id: str | None) -> DocumentReference:
        if not self._active:
            raise NoActiveBatchException()
        if len(self._operations) >= self.max_operations:
            raise BatchSizeExceededException(self.max_operations)
        return self._client.collection(collection).document(doc_id)

    def _enqueue(self, operation: BatchOperation, write: dict) -> BatchOperation:
        self._operations.append(operation)
        self._writes.append(write)
        return operation

    def _reset(self) -> None:
        self._operations = []
        self._writes = []
        self._active = False

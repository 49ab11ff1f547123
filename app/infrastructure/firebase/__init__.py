"""Firestore integration: REST client, transactions and batch writes."""

from app.infrastructure.firebase._rest_client import (
    DocumentSnapshot,
    FirestoreRESTClient,
    Transaction,
)
from app.infrastructure.firebase._rest_encoding import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayUnion,
)
from app.infrastructure.firebase.batch import BatchResult, BatchWriteQueue
from app.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from app.infrastructure.firebase.transactions import (
    TransactionRunner,
    is_retryable_error,
)

__all__ = [
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "ArrayUnion",
    "BatchResult",
    "BatchWriteQueue",
    "DocumentSnapshot",
    "FirestoreRESTClient",
    "Transaction",
    "TransactionRunner",
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
    "is_retryable_error",
]

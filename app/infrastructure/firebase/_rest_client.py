"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps serverless bundle small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Transactions follow the REST flow: documents:beginTransaction, reads with
?transaction=, then documents:commit carrying the buffered writes (or
documents:rollback). A commit without a transaction is the atomic batch.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from app.domain.exceptions import ValidationException
from app.infrastructure.exceptions import DocumentExistsError, FirestoreException
from app.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_delete,
    encode_write,
)
from app.shared.utils.generators import generate_cuid


_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

# Canonical status by HTTP code, for error bodies without a "status" field.
_HTTP_STATUS_CODES: dict[int, str] = {
    400: "FAILED_PRECONDITION",
    401: "UNAUTHENTICATED",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    409: "ABORTED",
    429: "RESOURCE_EXHAUSTED",
    500: "INTERNAL",
    501: "UNIMPLEMENTED",
    503: "UNAVAILABLE",
    504: "DEADLINE_EXCEEDED",
}


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _error_from_response(resp: httpx.Response) -> FirestoreException:
    """Build a FirestoreException from a non-2xx response body."""
    status = _HTTP_STATUS_CODES.get(resp.status_code, "UNKNOWN")
    message = f"Firestore request failed with HTTP {resp.status_code}"
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, list) and payload:
        payload = payload[0]
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        status = err.get("status") or status
        message = err.get("message") or message
    if status == "ALREADY_EXISTS":
        return DocumentExistsError(message)
    return FirestoreException(status, message, resp.status_code)


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: dict[str, str] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API.

    A 404 on GET returns None (missing document); every other failure raises
    FirestoreException carrying the canonical status (ABORTED, NOT_FOUND, ...).
    Timeouts surface as DEADLINE_EXCEEDED and connection errors as UNAVAILABLE.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    try:
        if method == "GET":
            resp = await client.get(url, headers=headers, params=params)
        elif method == "POST":
            resp = await client.post(url, headers=headers, json=body, params=params)
        else:
            raise ValueError(f"Unsupported method: {method!r}")
    except httpx.TimeoutException as exc:
        raise FirestoreException("DEADLINE_EXCEEDED", f"Firestore request timed out: {exc}") from exc
    except httpx.TransportError as exc:
        raise FirestoreException("UNAVAILABLE", f"Firestore unreachable: {exc}") from exc
    if resp.status_code == 404 and method == "GET":
        return None
    if resp.status_code not in (200, 204):
        raise _error_from_response(resp)
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    @property
    def path(self) -> str:
        """Path relative to the documents root, e.g. 'users/abc'."""
        return self._path.split("/documents/", 1)[-1]

    @property
    def name(self) -> str:
        """Full resource name used in commit writes."""
        return self._path

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (single-write commit, sentinels allowed)."""
        await self._client.commit([encode_write(self.name, data, "set")])

    async def get(self, transaction_id: str | None = None) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        params = {"transaction": transaction_id} if transaction_id else None
        out = await self._client._call(
            "GET", f"{self._client.base_url}/{self._path}", params=params
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document; without an id a new CUID is generated (auto-id).

        Ids are single path segments; one containing "/" would address a
        document in a subcollection and is rejected.
        """
        if document_id and "/" in document_id:
            raise ValidationException(
                f"Invalid document id: {document_id!r}", field="document_id"
            )
        return DocumentReference(
            self._client, f"{self._path}/{document_id or generate_cuid()}"
        )


class Transaction:
    """One read-write transaction attempt.

    Reads go to the server immediately (pinned to the transaction); writes are
    buffered and sent with commit(), so nothing is visible until commit succeeds.
    """

    def __init__(self, client: "FirestoreRESTClient", transaction_id: str) -> None:
        self._client = client
        self.id = transaction_id
        self._writes: list[dict] = []
        self._finished = False

    async def get(self, ref: DocumentReference) -> DocumentSnapshot | None:
        """Read a document inside the transaction; None if it does not exist."""
        return await ref.get(transaction_id=self.id)

    def create(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        """Queue a create; the commit fails with ALREADY_EXISTS if the document exists."""
        self._writes.append(encode_write(ref.name, data, "create"))

    def set(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        """Queue a create-or-overwrite."""
        self._writes.append(encode_write(ref.name, data, "set"))

    def update(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        """Queue a field update; the commit fails with NOT_FOUND if the document is missing."""
        self._writes.append(encode_write(ref.name, data, "update"))

    def delete(self, ref: DocumentReference) -> None:
        """Queue a delete."""
        self._writes.append(encode_delete(ref.name))

    async def commit(self) -> dict:
        """Send the buffered writes; all apply atomically or none do."""
        self._finished = True
        return await self._client.commit(self._writes, transaction_id=self.id)

    async def rollback(self) -> None:
        """Release the transaction without writing. No-op after commit."""
        if self._finished:
            return
        self._finished = True
        await self._client.rollback(self.id)


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = _BASE,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._database = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self._database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    @property
    def project_id(self) -> str:
        return self._project_id

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking.

        Returns None when no credentials are configured (emulator).
        """
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    async def _call(
        self,
        method: str,
        url: str,
        *,
        body: dict | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        return await _request_async(
            self._http,
            url,
            method=method,
            body=body,
            access_token=await self.get_token(),
            params=params,
        )

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    async def begin_transaction(
        self, retry_transaction: str | None = None
    ) -> Transaction:
        """Start a read-write transaction.

        Args:
            retry_transaction: Id of an aborted transaction this one retries;
                Firestore uses it to keep the retry's lock priority.
        """
        read_write: dict[str, Any] = {}
        if retry_transaction:
            read_write["retryTransaction"] = retry_transaction
        out = await self._call(
            "POST",
            f"{self.base_url}/{self._prefix}:beginTransaction",
            body={"options": {"readWrite": read_write}},
        )
        return Transaction(self, out["transaction"])

    async def commit(
        self, writes: list[dict], transaction_id: str | None = None
    ) -> dict:
        """Apply writes atomically, inside a transaction when transaction_id is given."""
        body: dict[str, Any] = {"writes": writes}
        if transaction_id:
            body["transaction"] = transaction_id
        return await self._call(
            "POST", f"{self.base_url}/{self._prefix}:commit", body=body
        )

    async def rollback(self, transaction_id: str) -> None:
        await self._call(
            "POST",
            f"{self.base_url}/{self._prefix}:rollback",
            body={"transaction": transaction_id},
        )

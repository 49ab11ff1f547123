"""Encode/decode Python values to/from Firestore REST API 'fields' format.

Also builds Write objects for documents:commit, turning the write sentinels
(SERVER_TIMESTAMP, DELETE_FIELD, ArrayUnion) into updateMask entries and
field transforms.
"""

import base64
import re
from datetime import UTC, datetime
from typing import Any


class _Sentinel:
    """Marker value with special meaning in a write."""

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


SERVER_TIMESTAMP = _Sentinel("SERVER_TIMESTAMP")
"""Field is set to the commit time by the server."""

DELETE_FIELD = _Sentinel("DELETE_FIELD")
"""Field is removed from the document (update writes only)."""


class ArrayUnion:
    """Append the given values to an array field, skipping ones already present."""

    def __init__(self, values: list[Any]) -> None:
        self.values = list(values)

    def __repr__(self) -> str:
        return f"ArrayUnion({self.values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArrayUnion) and other.values == self.values


def _encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(UTC)
        return {"timestampValue": v.strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: _encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to Firestore REST Document.fields format."""
    return {"fields": {k: _encode_value(v) for k, v in data.items()}}


# Firestore may return nanosecond precision; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def _decode_timestamp(raw: str) -> datetime:
    raw = _FRACTION_RE.sub(r".\1", raw)
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def _decode_value(obj: dict) -> Any:
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return obj["doubleValue"]
    if "timestampValue" in obj:
        return _decode_timestamp(obj["timestampValue"])
    if "stringValue" in obj:
        return obj["stringValue"]
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "arrayValue" in obj:
        vals = obj.get("arrayValue", {}).get("values") or []
        return [_decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = obj["mapValue"].get("fields") or {}
        return {k: _decode_value(x) for k, x in fields.items()}
    return None


def decode_document(fields: dict | None) -> dict:
    """Convert Firestore REST Document.fields to a Python dict."""
    if not fields:
        return {}
    return {k: _decode_value(v) for k, v in fields.items()}


def _split_fields(
    data: dict[str, Any],
) -> tuple[dict[str, Any], list[str], list[dict]]:
    """Separate plain values, deleted field paths and field transforms."""
    plain: dict[str, Any] = {}
    deleted: list[str] = []
    transforms: list[dict] = []
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            transforms.append({"fieldPath": key, "setToServerValue": "REQUEST_TIME"})
        elif isinstance(value, ArrayUnion):
            transforms.append({
                "fieldPath": key,
                "appendMissingElements": {
                    "values": [_encode_value(x) for x in value.values]
                },
            })
        elif value is DELETE_FIELD:
            deleted.append(key)
        else:
            plain[key] = value
    return plain, deleted, transforms


def encode_write(name: str, data: dict[str, Any], kind: str) -> dict:
    """Build a Write for documents:commit.

    Args:
        name: Full document resource name.
        data: Field values; may contain write sentinels at top level.
        kind: 'create' (fails if the document exists), 'set' (create or
            overwrite) or 'update' (merge listed fields; fails if missing).

    Returns:
        Write object in REST JSON form.
    """
    plain, deleted, transforms = _split_fields(data)
    write: dict[str, Any] = {"update": {"name": name, **encode_document(plain)}}
    if kind == "create":
        if deleted:
            raise ValueError("DELETE_FIELD is only valid in update writes")
        write["currentDocument"] = {"exists": False}
    elif kind == "set":
        if deleted:
            raise ValueError("DELETE_FIELD is only valid in update writes")
    elif kind == "update":
        write["updateMask"] = {"fieldPaths": [*plain.keys(), *deleted]}
        write["currentDocument"] = {"exists": True}
    else:
        raise ValueError(f"Unsupported write kind: {kind!r}")
    if transforms:
        write["updateTransforms"] = transforms
    return write


def encode_delete(name: str) -> dict:
    """Build a delete Write for documents:commit."""
    return {"delete": name}

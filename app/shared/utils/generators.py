"""ID and value generators (CUIDs for auto ids, access key strings)."""

import secrets

from cuid2 import cuid_wrapper

from app.core.constants import (
    ACCESS_KEY_ALPHABET,
    ACCESS_KEY_GROUP_SIZE,
    ACCESS_KEY_LENGTH,
    ACCESS_KEY_SEPARATOR,
)

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Used as the auto-id for append-only documents (orders, logs).
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_access_key() -> str:
    """Generate a human-typeable access key such as ``7KQ2-M9XD-A0ZT``.

    Characters are drawn from A-Z0-9 with the ``secrets`` CSPRNG and grouped
    by four.
    """
    raw = "".join(secrets.choice(ACCESS_KEY_ALPHABET) for _ in range(ACCESS_KEY_LENGTH))
    return ACCESS_KEY_SEPARATOR.join(
        raw[i : i + ACCESS_KEY_GROUP_SIZE]
        for i in range(0, ACCESS_KEY_LENGTH, ACCESS_KEY_GROUP_SIZE)
    )

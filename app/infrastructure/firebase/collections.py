"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent and act as the single source of truth for the "schema".

Example:
    from app.infrastructure.firebase.client import get_firestore_client
    from app.infrastructure.firebase.collections import COLLECTION_USERS

    db = get_firestore_client()
    if db:
        snapshot = await db.collection(COLLECTION_USERS).document(uid).get()
"""

# Keyed by the generated key string (XXXX-XXXX-XXXX)
COLLECTION_ACCESS_KEYS = "accessKeys"
# Keyed by identity-provider uid; created outside this service
COLLECTION_USERS = "users"
# Append-only logs (auto ids)
COLLECTION_ROLE_CHANGES = "roleChanges"
COLLECTION_USER_ACTIVITY = "userActivity"
COLLECTION_ORDERS = "orders"

# Catalog (read-only here); documents carry a quizIds array
COLLECTION_SUBJECTS = "subjects"
COLLECTION_COURSES = "courses"

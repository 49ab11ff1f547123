"""Catalog lookups inside a transaction: resolve cart items to quiz ids."""

import asyncio
from dataclasses import dataclass, field

from app.application.dtos.access_key import Cart
from app.infrastructure.firebase._rest_client import (
    DocumentSnapshot,
    FirestoreRESTClient,
    Transaction,
)
from app.infrastructure.firebase.collections import COLLECTION_COURSES, COLLECTION_SUBJECTS


@dataclass
class CartContents:
    """Quiz ids found for a cart, split by catalog kind, plus unknown items."""

    subject_quiz_ids: list[str] = field(default_factory=list)
    course_quiz_ids: list[str] = field(default_factory=list)
    missing_subjects: list[str] = field(default_factory=list)
    missing_courses: list[str] = field(default_factory=list)

    @property
    def quiz_ids(self) -> list[str]:
        """All quiz ids, first occurrence order, duplicates removed."""
        return list(dict.fromkeys([*self.subject_quiz_ids, *self.course_quiz_ids]))

    @property
    def quiz_count(self) -> int:
        return len(self.subject_quiz_ids) + len(self.course_quiz_ids)

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_subjects or self.missing_courses)


async def _read_all(
    txn: Transaction, db: FirestoreRESTClient, collection: str, ids: tuple[str, ...]
) -> list[DocumentSnapshot | None]:
    refs = [db.collection(collection).document(doc_id) for doc_id in ids]
    return list(await asyncio.gather(*(txn.get(ref) for ref in refs)))


async def read_cart(txn: Transaction, db: FirestoreRESTClient, cart: Cart) -> CartContents:
    """Read every subject and course of ``cart`` within ``txn``."""
    contents = CartContents()
    subjects = await _read_all(txn, db, COLLECTION_SUBJECTS, cart.subjects)
    for subject_id, snap in zip(cart.subjects, subjects):
        if snap is None:
            contents.missing_subjects.append(subject_id)
        else:
            contents.subject_quiz_ids.extend(snap.to_dict().get("quizIds") or [])
    courses = await _read_all(txn, db, COLLECTION_COURSES, cart.courses)
    for course_id, snap in zip(cart.courses, courses):
        if snap is None:
            contents.missing_courses.append(course_id)
        else:
            contents.course_quiz_ids.extend(snap.to_dict().get("quizIds") or [])
    return contents

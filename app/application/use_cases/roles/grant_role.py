"""Grant-role use case: change a user's role and log the change atomically."""

from __future__ import annotations

from typing import Any

from app.application.dtos.role import GrantRoleCommand, GrantRoleResult
from app.core.constants import ROLE_REASON_MAX_LENGTH
from app.domain.enums import ActivityAction, UserRole
from app.domain.exceptions import UserNotFoundException, ValidationException
from app.infrastructure.firebase._rest_client import Transaction
from app.infrastructure.firebase._rest_encoding import DELETE_FIELD, SERVER_TIMESTAMP
from app.infrastructure.firebase.collections import (
    COLLECTION_ROLE_CHANGES,
    COLLECTION_USER_ACTIVITY,
    COLLECTION_USERS,
)
from app.infrastructure.firebase.transactions import TransactionRunner
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)

GRANT_ROLE_MAX_ATTEMPTS = 3


def _log_retry(attempt: int, error: BaseException, delay_ms: int) -> None:
    logger.warning(
        "Grant role transaction retry %d in %dms: %s", attempt, delay_ms, error
    )


class RoleService:
    """Changes user roles; one RoleChange and one UserActivity row per grant."""

    def __init__(
        self,
        runner: TransactionRunner,
        max_attempts: int = GRANT_ROLE_MAX_ATTEMPTS,
    ) -> None:
        self.runner = runner
        self.db = runner.client
        self.max_attempts = max_attempts

    async def grant_role(self, command: GrantRoleCommand) -> GrantRoleResult:
        """Set the target user's role.

        The previous role (student when unset) is recorded as ``fromRole`` so
        consecutive grants form a chain. A grant without expiry clears any
        earlier ``roleExpiresAt``. Self-grants are rejected by the caller.

        Raises:
            ValidationException: Bad role, reason or uid.
            UserNotFoundException: Target user has no profile.
        """
        if not command.uid:
            raise ValidationException("uid is required", field="uid")
        try:
            role = UserRole(command.role)
        except ValueError as e:
            raise ValidationException(
                f"role must be one of {UserRole.values()}", field="role"
            ) from e
        reason = command.reason.strip() if command.reason else None
        if reason and len(reason) > ROLE_REASON_MAX_LENGTH:
            raise ValidationException(
                f"reason must be at most {ROLE_REASON_MAX_LENGTH} characters",
                field="reason",
            )
        normalized = GrantRoleCommand(
            uid=command.uid,
            role=role,
            granted_by=command.granted_by,
            reason=reason or None,
            expires_at=ensure_utc(command.expires_at),
        )

        result = await self.runner.execute(
            lambda txn: self._grant(txn, normalized),
            max_retries=self.max_attempts,
            on_retry=_log_retry,
        )
        logger.info(
            "Role granted: %s %s -> %s by %s",
            result.uid,
            result.from_role,
            result.to_role,
            result.granted_by,
        )
        return result

    async def _grant(self, txn: Transaction, command: GrantRoleCommand) -> GrantRoleResult:
        user_ref = self.db.collection(COLLECTION_USERS).document(command.uid)
        snap = await txn.get(user_ref)
        if snap is None:
            raise UserNotFoundException(command.uid)
        from_role = snap.to_dict().get("role") or UserRole.STUDENT.value
        to_role = command.role.value

        update: dict[str, Any] = {
            "role": to_role,
            "updatedAt": SERVER_TIMESTAMP,
            "updatedBy": command.granted_by,
            "roleExpiresAt": command.expires_at or DELETE_FIELD,
        }
        if command.reason:
            update["roleReason"] = command.reason
        txn.update(user_ref, update)

        change_ref = self.db.collection(COLLECTION_ROLE_CHANGES).document()
        txn.create(
            change_ref,
            {
                "uid": command.uid,
                "fromRole": from_role,
                "toRole": to_role,
                "grantedBy": command.granted_by,
                "reason": command.reason,
                "expiresAt": command.expires_at,
                "timestamp": SERVER_TIMESTAMP,
            },
        )
        txn.set(
            self.db.collection(COLLECTION_USER_ACTIVITY).document(),
            {
                "uid": command.uid,
                "action": ActivityAction.ROLE_CHANGED.value,
                "fromRole": from_role,
                "toRole": to_role,
                "grantedBy": command.granted_by,
                "reason": command.reason,
                "timestamp": SERVER_TIMESTAMP,
            },
        )
        return GrantRoleResult(
            uid=command.uid,
            from_role=from_role,
            to_role=to_role,
            granted_by=command.granted_by,
            role_change_id=change_ref.id,
            reason=command.reason,
            expires_at=command.expires_at,
        )

"""Error normalizer: any exception -> stable code + localized user message.

Pure mapping, no I/O and no retries. Store status codes and domain error
codes each have a catalog entry; everything else becomes UNKNOWN_ERROR with
a generic message. Internal error text is only exposed in ``details`` when
``debug`` is on.
"""

from dataclasses import dataclass, field
from typing import Any

from app.domain.exceptions import ELearningException

DEFAULT_LOCALE = "en"
UNKNOWN_ERROR = "UNKNOWN_ERROR"

# Codes whose (English) exception message is authored here and safe to show.
_PASSTHROUGH_CODES = frozenset({"VALIDATION_ERROR"})

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "PERMISSION_DENIED": "You do not have permission to perform this action",
        "NOT_FOUND": "The requested data was not found",
        "ALREADY_EXISTS": "The data already exists",
        "RESOURCE_EXHAUSTED": "Request limit exceeded",
        "FAILED_PRECONDITION": "The operation's preconditions were not met",
        "ABORTED": "The operation was interrupted, please try again",
        "OUT_OF_RANGE": "Value is out of the allowed range",
        "UNIMPLEMENTED": "This feature is not available yet",
        "INTERNAL": "Internal system error",
        "UNAVAILABLE": "The service is temporarily unavailable",
        "DATA_LOSS": "Data loss detected",
        "UNAUTHENTICATED": "Please sign in to perform this action",
        "DEADLINE_EXCEEDED": "The request timed out, please try again",
        "VALIDATION_ERROR": "The submitted data is invalid",
        "AUTHENTICATION_ERROR": "Please sign in to perform this action",
        "RESOURCE_NOT_FOUND": "The requested data was not found",
        "KEY_NOT_FOUND": "Access key does not exist",
        "USER_NOT_FOUND": "User does not exist",
        "ORDER_NOT_FOUND": "Order does not exist",
        "KEY_ALREADY_USED": "This access key has already been used",
        "BATCH_ALREADY_ACTIVE": "A batch operation is already in progress",
        "NO_ACTIVE_BATCH": "No batch operation is in progress",
        "BATCH_SIZE_EXCEEDED": "Too many operations in one batch",
        "KEY_GENERATION_EXHAUSTED": "Could not generate an access key, please try again",
        "BATCH_COMMIT_FAILED": "Saving the batch failed; no changes were made",
        "SERVICE_UNAVAILABLE": "The service is temporarily unavailable",
        "RATE_LIMIT_EXCEEDED": "Too many requests, please slow down",
        UNKNOWN_ERROR: "Something went wrong. Please try again later.",
    },
    "vi": {
        "PERMISSION_DENIED": "Bạn không có quyền thực hiện thao tác này",
        "NOT_FOUND": "Không tìm thấy dữ liệu",
        "ALREADY_EXISTS": "Dữ liệu đã tồn tại",
        "RESOURCE_EXHAUSTED": "Vượt quá giới hạn yêu cầu",
        "FAILED_PRECONDITION": "Điều kiện không hợp lệ",
        "ABORTED": "Thao tác bị gián đoạn",
        "OUT_OF_RANGE": "Giá trị nằm ngoài phạm vi cho phép",
        "UNIMPLEMENTED": "Tính năng chưa được triển khai",
        "INTERNAL": "Lỗi hệ thống nội bộ",
        "UNAVAILABLE": "Dịch vụ tạm thời không khả dụng",
        "DATA_LOSS": "Mất dữ liệu",
        "UNAUTHENTICATED": "Cần đăng nhập để thực hiện thao tác này",
        "DEADLINE_EXCEEDED": "Yêu cầu quá thời gian, vui lòng thử lại",
        "VALIDATION_ERROR": "Dữ liệu không hợp lệ",
        "AUTHENTICATION_ERROR": "Cần đăng nhập để thực hiện thao tác này",
        "RESOURCE_NOT_FOUND": "Không tìm thấy dữ liệu",
        "KEY_NOT_FOUND": "Access key không tồn tại",
        "USER_NOT_FOUND": "User không tồn tại",
        "ORDER_NOT_FOUND": "Đơn hàng không tồn tại",
        "KEY_ALREADY_USED": "Key đã được sử dụng hoặc đã hết hạn",
        "BATCH_ALREADY_ACTIVE": "Đang có một batch đang xử lý",
        "NO_ACTIVE_BATCH": "Không có batch nào đang xử lý",
        "BATCH_SIZE_EXCEEDED": "Vượt quá giới hạn thao tác trong một batch",
        "KEY_GENERATION_EXHAUSTED": "Không thể tạo key duy nhất, vui lòng thử lại",
        "BATCH_COMMIT_FAILED": "Lưu batch thất bại, không có thay đổi nào",
        "SERVICE_UNAVAILABLE": "Dịch vụ tạm thời không khả dụng",
        "RATE_LIMIT_EXCEEDED": "Quá nhiều yêu cầu, vui lòng thử lại sau",
        UNKNOWN_ERROR: "Đã xảy ra lỗi. Vui lòng thử lại sau.",
    },
}


@dataclass(frozen=True)
class NormalizedError:
    code: str
    user_message: str
    details: dict[str, Any] | None = field(default=None)


def error_code_of(error: BaseException) -> str | None:
    """Machine code of ``error``: domain error_code, else a string ``code`` attribute."""
    if isinstance(error, ELearningException):
        return error.error_code
    code = getattr(error, "code", None)
    if isinstance(code, str) and code:
        return code.strip().upper().replace("-", "_")
    return None


def classify(
    error: BaseException,
    *,
    locale: str | None = None,
    debug: bool = False,
) -> NormalizedError:
    """Map an exception to a stable code and a user-facing message.

    Args:
        error: Any exception (store, domain or unexpected).
        locale: Catalog to use ('en' or 'vi'); unknown locales fall back to 'en'.
        debug: When True, ``details`` carries the internal error text.
    """
    locale = locale if locale in MESSAGES else DEFAULT_LOCALE
    catalog = MESSAGES[locale]
    code = error_code_of(error)
    if code is None or code not in catalog:
        code = UNKNOWN_ERROR

    if (
        locale == DEFAULT_LOCALE
        and code in _PASSTHROUGH_CODES
        and isinstance(error, ELearningException)
    ):
        user_message = error.message
    else:
        user_message = catalog[code]

    details: dict[str, Any] | None = None
    if debug:
        details = {"type": type(error).__name__, "error": str(error)}
        if isinstance(error, ELearningException) and error.details:
            details["context"] = error.details
    return NormalizedError(code=code, user_message=user_message, details=details)


def message_for(code: str, locale: str | None = None) -> str:
    """Catalog message for ``code``; the generic message when unknown."""
    catalog = MESSAGES.get(locale or DEFAULT_LOCALE, MESSAGES[DEFAULT_LOCALE])
    return catalog.get(code, catalog[UNKNOWN_ERROR])

"""User-facing texts (Mongolian) and error-to-text conversion."""

from __future__ import annotations

from posbot.api.errors import ApiError, AuthenticationError, NetworkError, TenantNotFoundError
from posbot.models import AdjustmentReport, CountStatus

LOAD_FAILED = "Системийн мэдээлэл татахад алдаа гарлаа"
SEARCH_FAILED = "Хайлт амжилтгүй боллоо"
COMPARE_FAILED = "Тооллого харьцуулах явцад алдаа гарлаа"
ADJUST_FAILED = "Засвар хийхэд алдаа гарлаа"
EMPTY_COUNT = "Эхлээд барааны тоо оруулна уу"
INVALID_COUNT = "Оруулсан тоо баримтын өгөгдөл буруу байна!"
ADJUST_ISSUES = "Засвар хийхэд асуудал байна:"
NO_STORE = "Дэлгүүр сонгогдоогүй байна"
NOT_AUTHENTICATED = "Нэвтрэх эрх хүчингүй байна. Дахин нэвтэрнэ үү"
NETWORK_PROBLEM = "Сүлжээний алдаа. Холболтоо шалгаад дахин оролдоно уу"
TENANT_MISSING = "Байгууллагын мэдээлэл олдсонгүй"
ACCESS_DENIED = "Танд энэ үйлдлийг хийх эрх байхгүй"
WRONG_STEP = "Энэ алхамд уг үйлдэл боломжгүй"
SESSION_EXPIRED = "Тооллогын мэдээлэл олдсонгүй. Тооллогоо дахин эхлүүлнэ үү"

STATUS_TEXT = {
    CountStatus.MATCH: "Тохирч байна",
    CountStatus.SHORT: "Дутуу",
    CountStatus.OVER: "Илүү",
}


def status_text(status: CountStatus | str) -> str:
    try:
        return STATUS_TEXT[CountStatus(status)]
    except ValueError:
        return "Тодорхойгүй"


def describe_error(prefix: str, error: Exception) -> str:
    """Localized one-line description of a failed remote call.

    Authentication and network failures get their own text; everything else
    is the action prefix plus the server's message.
    """
    if isinstance(error, AuthenticationError):
        return f"{prefix}: {NOT_AUTHENTICATED}"
    if isinstance(error, NetworkError):
        return f"{prefix}: {NETWORK_PROBLEM}"
    if isinstance(error, TenantNotFoundError):
        return f"{prefix}: {TENANT_MISSING}"
    if isinstance(error, ApiError) and error.message:
        return f"{prefix}: {error.message}"
    return prefix


def adjustment_report_text(report: AdjustmentReport) -> str:
    if report.failed:
        return f"Засвар дуусав: {report.succeeded} амжилттай, {report.failed} алдаатай"
    return f"Бүх засвар амжилттай хийгдлээ! ({report.succeeded} зүйл)"

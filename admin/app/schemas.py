from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from app.models.chat import GroupedChat
from app.models.comment import Comment
from app.models.payout import PayoutRequest
from app.models.report import Report, ReportStatus
from app.services.admin_payouts import Page, PayoutStats
from app.services.admin_reports import ReportStats
from app.services.payout_tracker import PayoutState, PayoutView


# Схемы для выплат разработчика
class OrderPayoutResponse(BaseModel):
    order_id: str
    state: PayoutState
    view: PayoutView
    requests: list[PayoutRequest]


class PayoutRequestedResponse(OrderPayoutResponse):
    message: str


class MyPayoutsResponse(BaseModel):
    requests: list[PayoutRequest]
    stats: PayoutStats


# Схемы для админки выплат
class AdminPayoutsResponse(BaseModel):
    page: Page[PayoutRequest]
    stats: PayoutStats


class ApprovePayout(BaseModel):
    paypal_payout_id: str | None = None
    notes: str | None = None


class RejectPayout(BaseModel):
    reason: str = Field(..., max_length=1000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise PydanticCustomError("empty_reason", "Укажите причину отклонения")
        return v


class PayoutProcessedResponse(BaseModel):
    message: str
    payout: PayoutRequest
    stats: PayoutStats


# Схемы для комментариев
class CommentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=5000)
    parent_id: str | None = None
    # Ответ от имени администратора
    is_admin: bool = False

    @field_validator("name", "message")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise PydanticCustomError("empty_text", "Поле не может быть пустым")
        return v


class CommentsResponse(BaseModel):
    post_id: str
    count: int
    total: int
    comments: list[Comment]


# Схемы для чатов
class ChatListResponse(BaseModel):
    chats: list[GroupedChat]
    total_unread: int
    inquiry_only: int


# Схемы для жалоб на вакансии
class ReportsResponse(BaseModel):
    page: Page[Report]
    stats: ReportStats


class UpdateReportStatus(BaseModel):
    status: ReportStatus

    @field_validator("status")
    @classmethod
    def not_back_to_pending(cls, v: ReportStatus) -> ReportStatus:
        if v == ReportStatus.PENDING:
            raise PydanticCustomError("pending_status", "Жалобу нельзя вернуть в статус pending")
        return v


class ReportUpdatedResponse(BaseModel):
    message: str
    report: Report
    stats: ReportStats

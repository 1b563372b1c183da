from .base import Base
from .chat import GroupedChat, OrderEntry, ServiceInquiry
from .comment import Comment
from .payout import Developer, PayoutRequest, PayoutStatus
from .report import Report, ReportReason, ReportStatus, ReportUser

__all__ = [
    "Base",
    "Comment",
    "Developer",
    "PayoutRequest",
    "PayoutStatus",
    "GroupedChat",
    "OrderEntry",
    "ServiceInquiry",
    "Report",
    "ReportReason",
    "ReportStatus",
    "ReportUser",
]

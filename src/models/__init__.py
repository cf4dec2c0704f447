"""Database model type definitions."""

from src.models.action_item import ActionItem, ActionItemStatus, Priority
from src.models.company import (
    Company,
    CompanyMember,
    CustomRole,
    Invitation,
    InvitationStatus,
    MemberRole,
    MembershipStatus,
)
from src.models.document import Document, DocumentType, DocumentVersion, Folder
from src.models.financial_report import FinancialReport, FinancialReportType, ReportStatus
from src.models.meeting import (
    AgendaItem,
    Decision,
    DecisionOutcome,
    Meeting,
    MeetingAttendee,
    MeetingNote,
    MeetingStatus,
    MeetingSummary,
    Vote,
    VoteChoice,
)
from src.models.okr import KeyResult, MetricType, Objective, OkrPeriod, OkrPeriodStatus
from src.models.org_role import EmploymentType, OrgRole
from src.models.permission import Permission, RolePermission
from src.models.resolution import Resolution, ResolutionCategory, ResolutionStatus
from src.models.user import User

__all__ = [
    "ActionItem",
    "ActionItemStatus",
    "AgendaItem",
    "Company",
    "CompanyMember",
    "CustomRole",
    "Decision",
    "DecisionOutcome",
    "Document",
    "DocumentType",
    "DocumentVersion",
    "EmploymentType",
    "FinancialReport",
    "FinancialReportType",
    "Folder",
    "Invitation",
    "InvitationStatus",
    "KeyResult",
    "Meeting",
    "MeetingAttendee",
    "MeetingNote",
    "MeetingStatus",
    "MeetingSummary",
    "MemberRole",
    "MembershipStatus",
    "MetricType",
    "Objective",
    "OkrPeriod",
    "OkrPeriodStatus",
    "OrgRole",
    "Permission",
    "Priority",
    "ReportStatus",
    "Resolution",
    "ResolutionCategory",
    "ResolutionStatus",
    "RolePermission",
    "User",
    "Vote",
    "VoteChoice",
]

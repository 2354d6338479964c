"""Business logic services."""

from club_ledger.services.member_service import MemberService
from club_ledger.services.ledger_service import LedgerService
from club_ledger.services.report_service import ReportService
from club_ledger.services.export_service import ExportService

__all__ = ["MemberService", "LedgerService", "ReportService", "ExportService"]

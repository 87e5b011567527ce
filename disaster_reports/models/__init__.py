"""SQLAlchemy models exposed for Alembic and imports."""
from .report import Report, ReportStatus
from .user import User, UserRole

__all__ = ["User", "UserRole", "Report", "ReportStatus"]

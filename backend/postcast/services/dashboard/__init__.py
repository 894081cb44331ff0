"""
Dashboard read models.
"""

from postcast.services.dashboard.service import (
    DashboardService,
    DashboardStats,
    GenerationHistoryPage,
    ProgramDetail,
    ProgramsPage,
    dashboard_service,
    format_total_duration,
    jst_month_range,
)

__all__ = [
    "DashboardService",
    "DashboardStats",
    "GenerationHistoryPage",
    "ProgramDetail",
    "ProgramsPage",
    "dashboard_service",
    "format_total_duration",
    "jst_month_range",
]

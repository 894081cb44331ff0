"""
Personalized program services.
"""

from postcast.services.programs.attempts import (
    ProgramAttemptStatistics,
    ProgramAttemptsPage,
    ProgramAttemptsService,
    program_attempts_service,
    success_rate,
)

__all__ = [
    "ProgramAttemptStatistics",
    "ProgramAttemptsPage",
    "ProgramAttemptsService",
    "program_attempts_service",
    "success_rate",
]

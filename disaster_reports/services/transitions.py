"""Report status parsing and transition rules."""
from __future__ import annotations

from disaster_reports.core.exceptions import InvalidStatusError, InvalidTransitionError
from disaster_reports.models.report import ReportStatus

FORWARD_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.VALIDATED, ReportStatus.RESOLVED}),
    ReportStatus.VALIDATED: frozenset(
        {ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED, ReportStatus.PENDING}
    ),
    ReportStatus.IN_PROGRESS: frozenset({ReportStatus.RESOLVED, ReportStatus.VALIDATED}),
    ReportStatus.RESOLVED: frozenset({ReportStatus.IN_PROGRESS}),
}


def parse_status(value: object) -> ReportStatus:
    if isinstance(value, ReportStatus):
        return value
    if isinstance(value, str):
        try:
            return ReportStatus(value)
        except ValueError:
            pass
    raise InvalidStatusError(value)


class TransitionPolicy:
    """Decide whether a report may move between two statuses.

    In permissive mode any status may follow any other, which lets an admin
    override a mistaken triage decision. Strict mode only allows the moves in
    ``FORWARD_TRANSITIONS``. Re-applying the current status is always allowed so
    a report can be reassigned without changing state.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def allowed(self, current: ReportStatus, target: ReportStatus) -> bool:
        if not self.strict or current == target:
            return True
        return target in FORWARD_TRANSITIONS[current]

    def check(self, current: ReportStatus | str, target: ReportStatus | str) -> None:
        target_status = parse_status(target)
        if not self.strict:
            return
        current_status = parse_status(current)
        if not self.allowed(current_status, target_status):
            raise InvalidTransitionError(current_status.value, target_status.value)

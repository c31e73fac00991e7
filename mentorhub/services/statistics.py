# mentorhub/services/statistics.py
"""
Derived counts for the project, report and resource listings.

Both aggregations are pure functions of the collection they are given.
The caller passes the reference time explicitly; nothing here reads the
clock.
"""
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional

from mentorhub.rbac.roles import SubmissionStatus


@dataclass(frozen=True)
class SubmissionStats:
    total: int
    approved_count: int
    in_review_count: int
    this_period_count: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ResourceStats:
    total: int
    published_count: int
    total_downloads: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _field(item: Any, *names: str) -> Any:
    """Read the first non-null attribute or key among names"""
    for name in names:
        if isinstance(item, dict):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        if value is not None:
            return value
    return None


def _same_month(moment: Optional[date], now: date) -> bool:
    if moment is None:
        return False
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment)
    return moment.year == now.year and moment.month == now.month


def aggregate_submissions(items: Iterable[Any], now: date) -> SubmissionStats:
    """
    Count projects or reports by review state.

    Args:
        items: Submissions already filtered by the caller's view rights
        now: Reference time; its calendar month and year define "this period"

    Returns:
        SubmissionStats with total, approved, in-review and this-month counts
    """
    total = approved = in_review = this_period = 0
    for item in items:
        total += 1
        status = SubmissionStatus.parse(_field(item, 'status'))
        if status == SubmissionStatus.APPROVED:
            approved += 1
        elif status == SubmissionStatus.IN_REVIEW:
            in_review += 1
        if _same_month(_field(item, 'submitted_at', 'created_at'), now):
            this_period += 1
    return SubmissionStats(total, approved, in_review, this_period)


def aggregate_resources(items: Iterable[Any]) -> ResourceStats:
    """Count resources, published resources and the sum of their downloads."""
    total = published = downloads = 0
    for item in items:
        total += 1
        if _field(item, 'is_published'):
            published += 1
        downloads += _field(item, 'download_count') or 0
    return ResourceStats(total, published, downloads)

"""
Activity listing queries.

The listing endpoint is a conjunction of small named predicates
(status, category, free text, date range, participants range), a sort
order and a (skip, limit) window. Everything here except the functions
taking a ``Session`` is pure and can be tested without a database.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, literal, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import casefold
from .logging_config import db_logger, timed
from .models.activity import Activity, ActivityStatus
from .responses import QueryFailedError
from .schemas.activity import ActivityQuery, SortField, SortOrder

SEARCH_FIELDS = (Activity.title, Activity.description, Activity.location)

# OFFSET is a signed 64-bit integer on SQLite and PostgreSQL
MAX_OFFSET = 2**63 - 1

SORT_COLUMNS = {
    SortField.DATE: Activity.date,
    SortField.TITLE: Activity.title,
    SortField.PARTICIPANTS: Activity.participants,
    SortField.CREATED_AT: Activity.created_at,
    SortField.UPDATED_AT: Activity.updated_at,
}

SORT_OPTIONS = [
    {"value": SortField.DATE.value, "label": "Activity date"},
    {"value": SortField.TITLE.value, "label": "Title"},
    {"value": SortField.PARTICIPANTS.value, "label": "Participants"},
    {"value": SortField.CREATED_AT.value, "label": "Created"},
    {"value": SortField.UPDATED_AT.value, "label": "Last updated"},
]

SORT_ORDERS = [
    {"value": SortOrder.DESC.value, "label": "Descending"},
    {"value": SortOrder.ASC.value, "label": "Ascending"},
]

STATUS_LABELS = {
    ActivityStatus.UPCOMING.value: "Upcoming",
    ActivityStatus.ONGOING.value: "Ongoing",
    ActivityStatus.COMPLETED.value: "Completed",
}


# ============================================================
# PREDICATES
# ============================================================

def _value(option):
    return getattr(option, "value", option)


def status_equals(status):
    return Activity.status == _value(status)


def category_equals(category):
    return Activity.category == _value(category)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def text_contains_any(term: str, fields=SEARCH_FIELDS):
    """Case-insensitive substring match on any of ``fields``, non-ASCII letters included."""
    pattern = casefold(literal(f"%{escape_like(term)}%"))
    return or_(*(casefold(column).like(pattern, escape="\\") for column in fields))


def _in_range(column, lower=None, upper=None):
    clauses = []
    if lower is not None:
        clauses.append(column >= lower)
    if upper is not None:
        clauses.append(column <= upper)
    if not clauses:
        return None
    return clauses[0] if len(clauses) == 1 else and_(*clauses)


def date_in_range(date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
    return _in_range(Activity.date, date_from, date_to)


def count_in_range(minimum: Optional[int] = None, maximum: Optional[int] = None):
    return _in_range(Activity.participants, minimum, maximum)


def build_filter(params: ActivityQuery) -> list:
    """Predicates for ``params``, to be combined conjunctively."""
    predicates = []

    if params.status:
        predicates.append(status_equals(params.status))
    if params.category:
        predicates.append(category_equals(params.category))

    term = params.search_term
    if term:
        predicates.append(text_contains_any(term))

    for predicate in (
        date_in_range(params.date_from, params.date_to),
        count_in_range(params.participants_min, params.participants_max),
    ):
        if predicate is not None:
            predicates.append(predicate)

    return predicates


def build_sort(params: ActivityQuery) -> list:
    column = SORT_COLUMNS[params.sort_by]
    primary = column.asc() if params.sort_order == SortOrder.ASC else column.desc()
    # id breaks ties so windows don't overlap between pages
    return [primary, Activity.id.asc()]


# ============================================================
# PAGINATION
# ============================================================

def build_pagination(total: int, page: int, limit: int) -> Dict[str, Any]:
    """Pagination block for a window of ``limit`` items starting at ``page``."""
    skip = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
        "startIndex": skip + 1,
        "endIndex": min(skip + limit, total),
    }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def effective_filters(params: ActivityQuery) -> Dict[str, Any]:
    """Echo of the parameters actually applied, after defaults and aliasing."""
    return {
        "status": _value(params.status),
        "category": _value(params.category),
        "keyword": params.search_term,
        "dateFrom": _isoformat(params.date_from),
        "dateTo": _isoformat(params.date_to),
        "participantsMin": params.participants_min,
        "participantsMax": params.participants_max,
        "sortBy": params.sort_by.value,
        "sortOrder": params.sort_order.value,
    }


@dataclass
class ActivityPage:
    activities: List[Activity]
    total: int
    pagination: Dict[str, Any] = field(default_factory=dict)
    filters: Dict[str, Any] = field(default_factory=dict)


# ============================================================
# QUERIES
# ============================================================

@timed(db_logger)
def list_activities(db: Session, params: ActivityQuery) -> ActivityPage:
    """Fetch one page of activities matching ``params`` and the total match count."""
    predicates = build_filter(params)

    try:
        if params.skip > MAX_OFFSET:
            activities = []
        else:
            activities = (
                db.query(Activity)
                .filter(*predicates)
                .order_by(*build_sort(params))
                .offset(params.skip)
                .limit(params.limit)
                .all()
            )
        total = db.query(func.count(Activity.id)).filter(*predicates).scalar() or 0
    except SQLAlchemyError as exc:
        raise QueryFailedError("Failed to query activities") from exc

    return ActivityPage(
        activities=activities,
        total=total,
        pagination=build_pagination(total, params.page, params.limit),
        filters=effective_filters(params),
    )


def _grouped_counts(db: Session, column) -> list:
    count = func.count(Activity.id).label("count")
    return db.query(column, count).group_by(column).order_by(count.desc()).all()


@timed(db_logger)
def activity_stats(db: Session) -> Dict[str, Any]:
    """Totals by status and category plus overall counts."""
    try:
        by_status = _grouped_counts(db, Activity.status)
        by_category = _grouped_counts(db, Activity.category)
        total = db.query(func.count(Activity.id)).scalar() or 0
        total_participants = db.query(func.sum(Activity.participants)).scalar() or 0
    except SQLAlchemyError as exc:
        raise QueryFailedError("Failed to compute activity statistics") from exc

    return {
        "total": total,
        "totalParticipants": total_participants,
        "byStatus": {status: count for status, count in by_status},
        "byCategory": {category: count for category, count in by_category},
    }


@timed(db_logger)
def filter_options(db: Session) -> Dict[str, Any]:
    """Values currently present in the collection, for building filter UIs."""
    try:
        categories = _grouped_counts(db, Activity.category)
        statuses = _grouped_counts(db, Activity.status)
        min_date, max_date = db.query(func.min(Activity.date), func.max(Activity.date)).one()
        min_participants, max_participants = db.query(
            func.min(Activity.participants), func.max(Activity.participants)
        ).one()
    except SQLAlchemyError as exc:
        raise QueryFailedError("Failed to load filter options") from exc

    return {
        "categories": [
            {"value": category, "label": category, "count": count}
            for category, count in categories
            if category
        ],
        "statuses": [
            {"value": status, "label": STATUS_LABELS.get(status, status), "count": count}
            for status, count in statuses
            if status
        ],
        "dateRange": {
            "min": _isoformat(min_date),
            "max": _isoformat(max_date),
        } if min_date is not None else None,
        "participantsRange": {
            "min": min_participants,
            "max": max_participants,
        } if min_participants is not None else None,
        "sortOptions": SORT_OPTIONS,
        "sortOrders": SORT_ORDERS,
    }

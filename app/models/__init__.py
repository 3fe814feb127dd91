from .activity import Activity, ActivityCategory, ActivityStatus

__all__ = [
    "Activity",
    "ActivityCategory",
    "ActivityStatus",
]

from .activity import (
    ActivityCreate,
    ActivityUpdate,
    ActivityQuery,
    MediaDeleteRequest,
    SortField,
    SortOrder,
)

__all__ = [
    "ActivityCreate", "ActivityUpdate", "ActivityQuery",
    "MediaDeleteRequest",
    "SortField", "SortOrder",
]

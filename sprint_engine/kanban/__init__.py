from .board import default_columns, group_by_column, resolve_status, wip_warnings
from .models import BoardColumn, MoveResult, WipWarning

__all__ = [
    "BoardColumn",
    "MoveResult",
    "WipWarning",
    "default_columns",
    "group_by_column",
    "resolve_status",
    "wip_warnings",
]

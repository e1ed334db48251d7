from .queries import QueriesTable, StatusLine

__all__ = ["QueriesTable", "StatusLine"]

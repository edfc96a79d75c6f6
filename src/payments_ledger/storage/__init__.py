from .reject_store import RejectEntry, RejectStore

__all__ = [
    "RejectStore",
    "RejectEntry",
]

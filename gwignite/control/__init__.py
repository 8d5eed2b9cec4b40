from .policy import HistoryStats, choose_action, resolve_action

__all__ = ["HistoryStats", "choose_action", "resolve_action"]

from .filter import admission_threshold, efficiency, filter_messages, rg_avg_pool
from .generator import message_metrics, precision_from_delta, task_biased_belief

__all__ = [
    "admission_threshold",
    "efficiency",
    "filter_messages",
    "message_metrics",
    "precision_from_delta",
    "rg_avg_pool",
    "task_biased_belief",
]

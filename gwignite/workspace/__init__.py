from .broadcast import apply_broadcast, combine_survivors, expand_rg_to_n
from .coherence import coherence, survivor_coherence
from .ignition import decide_ignition, resolve_ignition

__all__ = [
    "apply_broadcast",
    "coherence",
    "combine_survivors",
    "decide_ignition",
    "expand_rg_to_n",
    "resolve_ignition",
    "survivor_coherence",
]

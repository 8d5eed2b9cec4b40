from .adapter import bayes_update, normalize
from .metrics import (entropy, free_energy, kl, normalized_uncertainty,
                      ravel_multi_index, safe_ln_n, softmax_logits)

__all__ = [
    "bayes_update",
    "entropy",
    "free_energy",
    "kl",
    "normalize",
    "normalized_uncertainty",
    "ravel_multi_index",
    "safe_ln_n",
    "softmax_logits",
]

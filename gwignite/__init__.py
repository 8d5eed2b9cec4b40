"""gwignite: belief update, message filtering and ignition for a single sniff loop."""

from .config import LoopConfig, default_config
from .session import LoopSession

__all__ = ["LoopConfig", "LoopSession", "default_config"]

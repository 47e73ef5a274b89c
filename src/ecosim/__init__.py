"""Trees, deer and wolves on a 2-D plane: an agent-based predator-prey simulator."""

from .config import Config, ConfigError
from .simulation import Ecosystem, advance, initialize

__all__ = ["Config", "ConfigError", "Ecosystem", "advance", "initialize"]

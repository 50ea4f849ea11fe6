from .display import LogDisplay, format_accuracy, format_speed, format_state
from .observable import LatestValue

__all__ = ["LatestValue", "LogDisplay", "format_accuracy", "format_speed", "format_state"]

from .config import get_section, load_yaml, merge_overrides, resolve_path
from .logging import setup_logging
from .types import RawFix

__all__ = [
    "RawFix",
    "get_section",
    "load_yaml",
    "merge_overrides",
    "resolve_path",
    "setup_logging",
]

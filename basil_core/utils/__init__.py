from .logger import setup_logging
from .rounding import to_fixed, round2

__all__ = ["setup_logging", "to_fixed", "round2"]

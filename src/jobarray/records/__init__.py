from . import types
from . import loader
from . import validate

__all__ = [
    "types",
    "loader",
    "validate",
]

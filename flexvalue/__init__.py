from .core import canon, types
from . import (
    exceptions,
    config,
    countries,
    utils,
    validate,
    normalize,
    daily,
    flexibility,
    hybrid,
    summary,
    ingest,
    feeds,
    precompute,
)

__all__ = [
    "canon",
    "types",
    "exceptions",
    "config",
    "countries",
    "utils",
    "validate",
    "normalize",
    "daily",
    "flexibility",
    "hybrid",
    "summary",
    "ingest",
    "feeds",
    "precompute",
]

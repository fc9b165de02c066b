from .context_repo import (
    format_context,
    load_context,
    parse_context,
    save_context,
    try_load_context,
)
from .paths import ensure_output_dir, get_output_dir

__all__ = [
    "ensure_output_dir",
    "format_context",
    "get_output_dir",
    "load_context",
    "parse_context",
    "save_context",
    "try_load_context",
]

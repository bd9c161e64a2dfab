"""
Shared utilities for TeXPreview.

Common functionality used across contexts:
- LaTeX scanning helpers
- Text processing
- Configuration loading
- Logging and timestamps
"""

from texpreview.utils.config import PreviewConfigError, load_preview_config
from texpreview.utils.timestamp import now, now_exact

__all__ = ["PreviewConfigError", "load_preview_config", "now", "now_exact"]

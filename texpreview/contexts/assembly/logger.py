"""
Assembly context logger.

Provides logging interface for assembly context with automatic [assemble] prefix.
All assembly modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[assemble]"


# Wrapper functions with automatic [assemble] prefix


def _log_info(message: str) -> None:
    """Log info message with [assemble] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [assemble] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [assemble] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level assembly-specific logging helpers


def log_snapshot(root: str, num_sources: int, num_assets: int) -> None:
    """Log a project directory snapshot."""
    _log_debug(f"Snapshot of {root}: {num_sources} source files, {num_assets} assets")


def log_include(name: str, depth: int) -> None:
    """Log an include that was expanded."""
    _log_debug(f"{'  ' * depth}Including {name}")


def log_missing_include(name: str) -> None:
    """Log an include target the resolver could not provide."""
    _log_warning(f"Missing file: {name}")


def log_inclusion_cycle(name: str, branch: frozenset) -> None:
    """Log an include that would re-enter its own branch."""
    _log_warning(f"Recursive loop detected: {name} (branch: {', '.join(sorted(branch))})")

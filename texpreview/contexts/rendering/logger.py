"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from texpreview.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(
    log_dir: Optional[Path] = None, entry: Optional[str] = None, verbose: bool = False
) -> Optional[Path]:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this preview session (None for console only)
        entry: Entry file requested for the session
        verbose: Show DEBUG messages on the console

    Returns:
        Path to log file, or None when logging to console only

    Example:
        from texpreview.contexts.rendering.logger import setup_rendering_logger, _log_info

        log_file = setup_rendering_logger(log_dir)
        _log_info("Starting compilation...")
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Entry file": entry or "(auto)"},
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compile_start(entry_name: str, num_files: int, num_assets: int) -> None:
    """Log start of a compile pass with context."""
    _log_info(f"Compiling {entry_name}")
    _log_debug(f"  Files: {num_files}")
    _log_debug(f"  Assets: {num_assets}")


def log_stage_complete(stage_name: str, input_len: int, output_len: int) -> None:
    """Log one pipeline stage."""
    _log_debug(f"  Stage {stage_name}: {input_len} -> {output_len} chars")


def log_stage_failure(stage_name: str, error: Exception) -> None:
    """Log a stage that raised; its input is passed through unchanged."""
    logger.opt(exception=error).error(
        f"{CONTEXT_PREFIX} Stage {stage_name} failed, passing its input through: {error}"
    )


def log_compile_result(result, elapsed_time: float) -> None:
    """
    Log compile result with its diagnostics.

    Args:
        result: CompileResult from compile_document()
        elapsed_time: Time taken to compile
    """
    if result.success:
        _log_success(f"{result.entry_file}: compiled ({elapsed_time * 1000:.0f} ms)")
    else:
        _log_error(f"Compilation failed ({elapsed_time * 1000:.0f} ms)")

    for entry in result.diagnostics:
        if entry.severity == "error":
            _log_error(f"  {entry.message}")
        elif entry.severity == "warning":
            _log_warning(f"  {entry.message}")
        else:
            _log_debug(f"  {entry.message}")

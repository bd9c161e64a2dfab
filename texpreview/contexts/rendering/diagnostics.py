"""
Diagnostic log and compile result.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from texpreview.utils.timestamp import now_exact


class Severity:
    """Enum-like class for diagnostic severities"""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class DiagnosticEntry:
    """
    One diagnostic of a compile pass.

    Attributes:
        id: Sequential id within the pass ("1", "2", ...)
        severity: Severity.INFO, Severity.WARNING or Severity.ERROR
        message: Human-readable description
        file: File the diagnostic refers to, if any
        line: Line number in that file, if known
        timestamp: ISO-8601 time the entry was recorded
    """

    id: str
    severity: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    timestamp: str = field(default_factory=now_exact)


class DiagnosticLog:
    """
    Append-only diagnostic log for one compile pass.

    Example:
        >>> log = DiagnosticLog()
        >>> log.warning("Missing \\\\documentclass", file="main.tex").id
        '1'
        >>> [entry.severity for entry in log.entries]
        ['warning']
    """

    def __init__(self):
        self._entries: List[DiagnosticEntry] = []

    def append(
        self, severity: str, message: str, file: Optional[str] = None, line: Optional[int] = None
    ) -> DiagnosticEntry:
        entry = DiagnosticEntry(
            id=str(len(self._entries) + 1),
            severity=severity,
            message=message,
            file=file,
            line=line,
        )
        self._entries.append(entry)
        return entry

    def info(self, message: str, **kwargs) -> DiagnosticEntry:
        return self.append(Severity.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> DiagnosticEntry:
        return self.append(Severity.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> DiagnosticEntry:
        return self.append(Severity.ERROR, message, **kwargs)

    @property
    def entries(self) -> List[DiagnosticEntry]:
        """Copy of the entries in the order they were recorded."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class CompileResult:
    """
    Result of one compile pass.

    Attributes:
        rendered_output: Rendered document body ("" when nothing could be compiled)
        diagnostics: Ordered diagnostics recorded during the pass
        entry_file: Entry file that was compiled (None if none was found)
    """

    rendered_output: str = ""
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    entry_file: Optional[str] = None

    @property
    def errors(self) -> List[DiagnosticEntry]:
        return [entry for entry in self.diagnostics if entry.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return [entry for entry in self.diagnostics if entry.severity == Severity.WARNING]

    @property
    def success(self) -> bool:
        """Whether the pass produced output without error diagnostics."""
        return self.entry_file is not None and not self.errors

"""
Assembly Context

Responsibilities:
- Snapshots project files behind read-only file and asset resolvers
- Selects the entry file of a project
- Expands include directives into one logical source with cycle protection
- Strips comments, preamble and setup-only directives

Owns: Source snapshots, include graph traversal, source cleanup
Never: Emits rendered document structure beyond inline include markers
"""

from texpreview.contexts.assembly.imports import ImportFrame, resolve_imports
from texpreview.contexts.assembly.resolvers import (
    DirectoryAssetResolver,
    DirectoryFileResolver,
    MappingAssetResolver,
    MappingFileResolver,
    SourceFile,
    open_project,
    select_entry_file,
)
from texpreview.contexts.assembly.stripper import strip_source

__all__ = [
    # Include resolution
    "ImportFrame",
    "resolve_imports",
    # Resolvers and snapshots
    "SourceFile",
    "MappingFileResolver",
    "MappingAssetResolver",
    "DirectoryFileResolver",
    "DirectoryAssetResolver",
    "open_project",
    "select_entry_file",
    # Cleanup
    "strip_source",
]

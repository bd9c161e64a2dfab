"""
Source and asset resolvers.

The pipeline never touches storage directly. It reads project files through a
FileResolver (LaTeX sources keyed by basename) and images through an
AssetResolver (binary data or URLs keyed by basename). Both are read-only
snapshots for the duration of one compile pass.

Implementations:
- MappingFileResolver / MappingAssetResolver: in-memory dicts (editors, tests)
- DirectoryFileResolver / DirectoryAssetResolver: snapshot of a project folder
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from texpreview.contexts.assembly.logger import log_snapshot

AssetData = Union[bytes, str]

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".bmp", ".webp")
TEX_EXTENSION = ".tex"


class FileKind:
    """Enum-like class for source file kinds"""

    TEX = "tex"
    IMAGE = "image"
    OTHER = "other"


def classify_file(name: str, image_extensions: Sequence[str] = IMAGE_EXTENSIONS) -> str:
    """
    Classify a file name by extension.

    Example:
        >>> classify_file("intro.tex")
        'tex'
        >>> classify_file("plot.PNG")
        'image'
    """
    suffix = Path(name).suffix.lower()
    if suffix == TEX_EXTENSION:
        return FileKind.TEX
    if suffix in image_extensions:
        return FileKind.IMAGE
    return FileKind.OTHER


@dataclass(frozen=True)
class SourceFile:
    """
    Immutable snapshot of one project file.

    Attributes:
        name: Basename, unique within one compile pass
        content: Text for sources, raw bytes for images
        kind: One of FileKind.TEX, FileKind.IMAGE, FileKind.OTHER
    """

    name: str
    content: AssetData
    kind: str


class FileResolver(Protocol):
    def lookup(self, name: str) -> Optional[str]:
        ...

    def names(self) -> Iterable[str]:
        ...


class AssetResolver(Protocol):
    def lookup(self, name: str) -> Optional[AssetData]:
        ...

    def keys(self) -> Iterable[str]:
        ...


class MappingFileResolver:
    """FileResolver over an in-memory {basename: text} mapping (copied at construction)."""

    def __init__(self, files: Mapping[str, str]):
        self._files: Dict[str, str] = dict(files)

    def lookup(self, name: str) -> Optional[str]:
        return self._files.get(name)

    def names(self) -> List[str]:
        return list(self._files)


class MappingAssetResolver:
    """AssetResolver over an in-memory {basename: bytes or URL} mapping."""

    def __init__(self, assets: Optional[Mapping[str, AssetData]] = None):
        self._assets: Dict[str, AssetData] = dict(assets or {})

    def lookup(self, name: str) -> Optional[AssetData]:
        return self._assets.get(name)

    def keys(self) -> List[str]:
        return list(self._assets)


def snapshot_directory(
    root: Path, image_extensions: Sequence[str] = IMAGE_EXTENSIONS
) -> List[SourceFile]:
    """
    Read every file under root into SourceFile snapshots.

    Folders are flattened: files are keyed by basename, and when two files share
    a basename the first in sorted path order wins. Hidden files and folders are
    skipped. Images are read as bytes; everything else as UTF-8 text (undecodable
    files are skipped).

    Args:
        root: Project directory
        image_extensions: Extensions read as binary images

    Returns:
        SourceFile list in sorted path order
    """
    root = Path(root)
    snapshot: List[SourceFile] = []
    seen = set()

    for path in sorted(root.rglob("*")):
        relative_parts = path.relative_to(root).parts
        if not path.is_file() or any(part.startswith(".") for part in relative_parts):
            continue
        if path.name in seen:
            continue

        kind = classify_file(path.name, image_extensions)
        if kind == FileKind.IMAGE:
            content: AssetData = path.read_bytes()
        else:
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                continue

        seen.add(path.name)
        snapshot.append(SourceFile(name=path.name, content=content, kind=kind))

    return snapshot


class DirectoryFileResolver(MappingFileResolver):
    """FileResolver over a snapshot of the text files in a project directory."""

    def __init__(self, root: Path, snapshot: Optional[List[SourceFile]] = None):
        self.root = Path(root)
        if snapshot is None:
            snapshot = snapshot_directory(self.root)
        super().__init__(
            {f.name: f.content for f in snapshot if f.kind != FileKind.IMAGE}
        )


class DirectoryAssetResolver(MappingAssetResolver):
    """AssetResolver over a snapshot of the images in a project directory."""

    def __init__(self, root: Path, snapshot: Optional[List[SourceFile]] = None):
        self.root = Path(root)
        if snapshot is None:
            snapshot = snapshot_directory(self.root)
        super().__init__({f.name: f.content for f in snapshot if f.kind == FileKind.IMAGE})


def open_project(root: Path, image_extensions: Sequence[str] = IMAGE_EXTENSIONS) -> tuple:
    """
    Snapshot a project directory once and build both resolvers from it.

    Args:
        root: Project directory
        image_extensions: Extensions served by the asset resolver

    Returns:
        (DirectoryFileResolver, DirectoryAssetResolver)
    """
    snapshot = snapshot_directory(root, image_extensions)
    files = DirectoryFileResolver(root, snapshot)
    assets = DirectoryAssetResolver(root, snapshot)
    log_snapshot(str(root), len(files.names()), len(assets.keys()))
    return files, assets


def select_entry_file(
    file_resolver: FileResolver,
    requested: Optional[str] = None,
    default_name: str = "main.tex",
    extension: str = TEX_EXTENSION,
) -> Optional[str]:
    """
    Pick the file to compile.

    Order: the requested name if the resolver has it, then default_name, then the
    first name (sorted) carrying the expected extension.

    Returns:
        Entry file name, or None when no candidate exists

    Example:
        >>> files = MappingFileResolver({"b.tex": "", "a.tex": "", "notes.txt": ""})
        >>> select_entry_file(files)
        'a.tex'
        >>> select_entry_file(files, requested="b.tex")
        'b.tex'
    """
    names = set(file_resolver.names())

    if requested and requested in names:
        return requested
    if default_name in names:
        return default_name

    candidates = sorted(name for name in names if name.endswith(extension))
    return candidates[0] if candidates else None

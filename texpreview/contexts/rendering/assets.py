"""
Asset binding for \\includegraphics.

A binding maps every asset name to something an <img> can display: binary
assets become base64 data URIs, string assets (URLs, data URIs) are used as
they are. Lookups fall back from the exact name to the name with a raster
extension appended, then to the first asset whose name contains it.
"""

import base64
import mimetypes
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Optional, Sequence, Tuple

from texpreview.contexts.assembly.resolvers import AssetData, AssetResolver
from texpreview.contexts.rendering.logger import _log_debug, _log_warning
from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import (
    LaTeXPatterns,
    format_percentage,
    read_command_arguments,
    width_to_percentage,
)

DEFAULT_RASTER_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp")
DEFAULT_REFERENCE_WIDTH_CM = 21.0

INCLUDEGRAPHICS_RE = re.compile(LaTeXPatterns.COMMAND_STARRED.format(command="includegraphics"))
WIDTH_OPTION_RE = re.compile(r"(?:^|,)\s*width\s*=\s*(?P<width>[^,]+)")


def to_image_reference(name: str, data: AssetData) -> str:
    """
    Turn asset data into an image source.

    Example:
        >>> to_image_reference("dot.png", b"abc")
        'data:image/png;base64,YWJj'
        >>> to_image_reference("logo.png", "https://example.org/logo.png")
        'https://example.org/logo.png'
    """
    if isinstance(data, str):
        return data
    mime_type, _ = mimetypes.guess_type(name)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"


@dataclass(frozen=True)
class AssetBinding:
    """
    Image references for one compile pass.

    Attributes:
        references: Asset name -> image source, in resolver key order
        raster_extensions: Extensions tried when a name has none
    """

    references: Dict[str, str]
    raster_extensions: Tuple[str, ...] = DEFAULT_RASTER_EXTENSIONS

    def resolve(self, name: str) -> Optional[str]:
        """Resolve a bare image name: exact, extension appended, then substring."""
        if not name:
            return None
        if name in self.references:
            return self.references[name]

        for extension in self.raster_extensions:
            candidate = f"{name}{extension}"
            if candidate in self.references:
                return self.references[candidate]

        for key, reference in self.references.items():
            if name in key:
                return reference

        return None


def build_asset_binding(
    asset_resolver: AssetResolver, raster_extensions: Sequence[str] = DEFAULT_RASTER_EXTENSIONS
) -> AssetBinding:
    """
    Build the binding from the resolver's full key set.

    Keys whose lookup returns None are skipped.
    """
    references = {}
    for key in asset_resolver.keys():
        data = asset_resolver.lookup(key)
        if data is None:
            continue
        references[key] = to_image_reference(key, data)

    _log_debug(f"  Bound {len(references)} assets")
    return AssetBinding(references=references, raster_extensions=tuple(raster_extensions))


def image_width(options: Optional[str], reference_width_cm: float = DEFAULT_REFERENCE_WIDTH_CM) -> Optional[str]:
    """
    CSS width from \\includegraphics options, or None when no usable width is given.

    Example:
        >>> image_width(r"width=0.8\\textwidth")
        '80%'
        >>> image_width("scale=0.5") is None
        True
    """
    if not options:
        return None
    match = WIDTH_OPTION_RE.search(options)
    if not match:
        return None
    percentage = width_to_percentage(match.group("width").strip(), reference_width_cm)
    return format_percentage(percentage) if percentage is not None else None


def bind_assets(
    body: str, binding: AssetBinding, reference_width_cm: float = DEFAULT_REFERENCE_WIDTH_CM
) -> str:
    """
    Replace every \\includegraphics with an image or a missing-image marker.

    Args:
        body: Document body
        binding: Asset references for this pass
        reference_width_cm: Page width absolute image widths are measured against

    Returns:
        Body with images bound. Never raises for unresolvable assets.
    """
    pieces = []
    pos = 0

    for match in INCLUDEGRAPHICS_RE.finditer(body):
        if match.start() < pos:
            continue

        optional_args, mandatory_args, end = read_command_arguments(
            body, match.end(), optional=1, mandatory=1
        )
        if not mandatory_args:
            continue

        name = PurePosixPath(mandatory_args[0].strip()).name
        reference = binding.resolve(name)

        pieces.append(body[pos : match.start()])
        if reference is None:
            _log_warning(f"Image not found: {name}")
            pieces.append(render_fragment("missing_image", name=name))
        else:
            pieces.append(
                render_fragment(
                    "image",
                    src=reference,
                    name=name,
                    width=image_width(optional_args[0], reference_width_cm),
                )
            )
        pos = end

    pieces.append(body[pos:])
    return "".join(pieces)

"""
HTML fragment templates for the preview.

Every piece of markup the pipeline emits (headings, lists, images, math,
include markers, the standalone page) comes from a Jinja2 template under
texpreview/templates/. This module loads and caches them.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound

TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates"


class FragmentRegistry:
    """
    Registry for loading and caching the Jinja2 templates of HTML fragments.

    Templates are stored in texpreview/templates/{name}.html.jinja. Every stage
    of the pipeline emits its markup through this registry so the look of the
    preview is defined in one place.

    Autoescaping is off because most variables carry already-rendered markup;
    templates escape literal values (file names, raw math source) with |e.
    """

    def __init__(self, templates_path: Path = None):
        """
        Initialize the fragment registry.

        Args:
            templates_path: Directory holding the fragment templates. Defaults to
                            texpreview/templates/
        """
        if templates_path is None:
            templates_path = TEMPLATES_PATH

        self.templates_path = templates_path
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def get_template(self, name: str) -> Template:
        """
        Get a template by fragment name, loading and caching it if necessary.

        Args:
            name: Fragment name (e.g., 'heading')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        template_path = f"{name}.html.jinja"

        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Fragment template not found for '{name}' at {self.templates_path / template_path}"
            ) from e

        self._cache[name] = template
        return template

    def render(self, fragment_name: str, **context) -> str:
        """
        Render a fragment template with the given variables.

        The fragment is named positionally so templates can take a `name`
        variable of their own (file names in include and image markers).
        """
        return self.get_template(fragment_name).render(**context)

    def get_template_path(self, name: str) -> Path:
        """Get the file path for a fragment template."""
        return self.templates_path / f"{name}.html.jinja"

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        """Check if a template is in the cache."""
        return name in self._cache


@lru_cache(maxsize=None)
def default_registry() -> FragmentRegistry:
    """Shared registry over the packaged templates."""
    return FragmentRegistry()


def render_fragment(fragment_name: str, **context) -> str:
    """Render a packaged fragment template."""
    return default_registry().render(fragment_name, **context)

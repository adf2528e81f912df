"""Self-contained HTML page generation for canvasreg.

Resolves the canvas for a file and writes a single HTML page that embeds
the file content together with the resolved renderer.
"""

import base64
import json
import logging
import mimetypes
from pathlib import Path

from .canvases.base import _SAFE_NAME_RE, CanvasDescriptor
from .canvases.registry import CanvasRegistry
from .config import CanvasregConfig, TemplateConfig
from .errors import CanvasregError

logger = logging.getLogger(__name__)

MIME_OVERRIDES = {
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def detect_file_type(path: Path) -> str:
    """Return the file type of a path: its lowercase extension, no dot.

    Returns an empty string for files without an extension.
    """
    return Path(path).suffix.lower().lstrip(".")


def detect_mime(path: Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix in MIME_OVERRIDES:
        return MIME_OVERRIDES[suffix]

    mime, _ = mimetypes.guess_type(str(path))
    return mime or "application/octet-stream"


def render_page(
    file_path: Path,
    registry: CanvasRegistry,
    theme: str | None = None,
    config: CanvasregConfig | None = None,
    output_path: Path | None = None,
    platform: str | None = None,
) -> Path:
    """Render a file into a self-contained HTML page.

    Args:
        file_path: Path to the file to render.
        registry: Registry to resolve the canvas from.
        theme: Presentation theme. Defaults to the config's theme.
        config: Optional configuration.
        output_path: Output HTML path. Defaults to <filename>.html.
        platform: Document platform style. Defaults to the config's platform.

    Returns:
        Path to the generated HTML file.

    Raises:
        CanvasregError: If the file cannot be read, no canvas is available
            for it, or the page cannot be written.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise CanvasregError(f"File not found: {file_path}")

    config = config or CanvasregConfig()
    theme = theme or config.theme
    platform = platform or config.platform

    file_type = detect_file_type(file_path)
    descriptor = registry.find_best_match(theme, file_type)
    if descriptor is None:
        raise CanvasregError(
            f"No canvas available for {file_path.name} "
            f"(theme {theme!r}, file type {file_type!r})"
        )
    if descriptor.renderer is None:
        raise CanvasregError(f"Canvas {descriptor.type!r} has no renderer")

    logger.info(
        "Resolved canvas %r for %s (theme %r, file type %r)",
        descriptor.type,
        file_path.name,
        theme,
        file_type,
    )

    content = _read_content(file_path)

    meta = {
        "filename": file_path.name,
        "fileType": file_type,
        "theme": theme,
        "platform": platform,
        "canvas": descriptor.type,
    }

    html = _generate_page_html(
        descriptor=descriptor,
        content=content,
        meta=meta,
        title=f"{config.template.title}: {file_path.name}",
        template=config.template,
    )

    if output_path is None:
        output_path = file_path.with_suffix(".html")

    output_path = Path(output_path)
    if output_path.resolve() == file_path.resolve():
        raise CanvasregError(f"Output would overwrite input: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        output_path.write_text(html, encoding="utf-8")
    except OSError as e:
        raise CanvasregError(f"Cannot write output {output_path}: {e}") from e

    return output_path


def _read_content(file_path: Path) -> str:
    """Read a file as text, or as a base64 data: URL for image content."""
    try:
        file_bytes = file_path.read_bytes()
    except OSError as e:
        raise CanvasregError(f"Cannot read file {file_path}: {e}") from e

    mime = detect_mime(file_path)
    if not mime.startswith("image/"):
        try:
            return file_bytes.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("%s is not UTF-8, decoding as latin-1", file_path)
            return file_bytes.decode("latin-1")

    b64_data = base64.b64encode(file_bytes).decode("ascii")
    return f"data:{mime};base64,{b64_data}"


def _generate_page_html(
    descriptor: CanvasDescriptor,
    content: str,
    meta: dict[str, str],
    title: str,
    template: TemplateConfig | None = None,
) -> str:
    """Generate self-contained HTML for one resolved canvas.

    Args:
        descriptor: The resolved canvas; must carry a renderer.
        content: File text or data: URL.
        meta: Values passed to the renderer as ``meta``.
        title: HTML page title.
        template: Template colors.

    Returns:
        Complete HTML string.
    """
    template = template or TemplateConfig()
    renderer = descriptor.renderer

    # Defense-in-depth: the name is checked at class definition time too
    if not _SAFE_NAME_RE.match(renderer.name):
        raise CanvasregError(f"Unsafe renderer name: {renderer.name!r}")

    css = _get_page_css(template) + _escape_for_script_block(renderer.css())

    dep_blocks = "".join(
        f"\n<script data-canvasreg-runtime>{_escape_for_script_block(dep)}</script>"
        for dep in renderer.dependencies()
    )

    var_name = "__cr_" + renderer.name
    renderer_js = _escape_for_script_block(renderer.js())
    content_js = _escape_for_script_block(json.dumps(content))
    meta_js = _escape_for_script_block(json.dumps(meta))

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{_html_escape(title)}</title>
  <style data-canvasreg-runtime>{css}</style>
</head>
<body>
  <div class="cr-toolbar">
    <span class="cr-title">{_html_escape(descriptor.icon)} {_html_escape(descriptor.name)}</span>
  </div>
  <main class="cr-container" data-canvas="{_html_escape(descriptor.type)}"></main>{dep_blocks}
  <script data-canvasreg-runtime>
(function() {{
  'use strict';
  var {var_name} = {renderer_js};
  var container = document.querySelector('.cr-container');
  var toolbar = document.querySelector('.cr-toolbar');
  {var_name}(container, {content_js}, {meta_js}, toolbar).catch(function(e) {{
    console.error('Canvas render failed:', e);
  }});
}})();
  </script>
</body>
</html>"""


def _html_escape(s: str) -> str:
    """Escape a string for HTML text and attribute values."""
    return (
        s.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _escape_for_script_block(s: str) -> str:
    """Escape content for embedding inside a <script> or <style> block.

    Replaces ``</`` with ``<\\/`` so the enclosing tag cannot be closed
    early.
    """
    return s.replace("</", "<\\/")


def _get_page_css(template: TemplateConfig) -> str:
    """Framework CSS for the page chrome; renderer CSS is appended to it."""
    return f"""
/* canvasreg page styles */
:root {{
  --cr-color-primary: {template.color_primary};
  --cr-color-secondary: {template.color_secondary};
}}
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
  background: #fafafa;
}}
.cr-toolbar {{
  display: flex;
  align-items: center;
  gap: 0.5rem;
  height: 40px;
  padding: 0 1rem;
  background: var(--cr-color-primary);
  color: #fff;
}}
.cr-title {{ flex: 1; font-weight: 500; }}
.toolbar-btn {{
  padding: 0.25rem 0.75rem;
  border: 1px solid rgba(255, 255, 255, 0.6);
  border-radius: 4px;
  background: transparent;
  color: #fff;
  cursor: pointer;
}}
.toolbar-btn.active {{ background: rgba(255, 255, 255, 0.2); }}
.cr-container {{ width: 100%; }}
"""

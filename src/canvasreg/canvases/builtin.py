"""Built-in canvases for canvasreg.

Each renderer implements the uniform signature:
    async function(container, content, meta, toolbar)

Also provides the composition root, :func:`build_registry`, which wires the
built-in canvases into a registry according to configuration.

Security note: the document renderer writes markdown output through
innerHTML. Its converter escapes all HTML entities before applying any
markup, so file content never reaches the DOM unescaped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import CanvasDescriptor, CanvasRenderer
from .registry import CanvasRegistry

if TYPE_CHECKING:
    from ..config import CanvasregConfig

# Platform styles offered by the document canvas
PLATFORMS = ("markdown", "wechat", "xiaohongshu", "zhihu")


class DocumentRenderer(CanvasRenderer):
    """Markdown documents styled for a publishing platform.

    ``meta.platform`` selects the style; a toolbar button switches between
    the rendered view and the raw source.
    """

    name = "document"

    def js(self) -> str:
        return """async function(container, content, meta, toolbar) {
    var body = document.createElement('article');
    body.className = 'cr-document';
    body.setAttribute('data-platform', meta.platform || 'markdown');
    body.innerHTML = renderMarkdown(content);

    var source = document.createElement('pre');
    source.className = 'cr-document-source';
    source.style.display = 'none';
    source.textContent = content;

    container.appendChild(body);
    container.appendChild(source);

    var toggleBtn = document.createElement('button');
    toggleBtn.className = 'toolbar-btn toolbar-toggle';
    toggleBtn.textContent = 'Source';
    toggleBtn.addEventListener('click', function() {
        var showSource = body.style.display !== 'none';
        body.style.display = showSource ? 'none' : '';
        source.style.display = showSource ? '' : 'none';
        toggleBtn.textContent = showSource ? 'Rendered' : 'Source';
        toggleBtn.classList.toggle('active', showSource);
    });
    toolbar.appendChild(toggleBtn);

    function renderMarkdown(text) {
        var html = text
            .replace(/&/g, '&amp;').replace(/</g, '&lt;').replace(/>/g, '&gt;')
            .replace(/^### (.+)$/gm, '<h3>$1</h3>')
            .replace(/^## (.+)$/gm, '<h2>$1</h2>')
            .replace(/^# (.+)$/gm, '<h1>$1</h1>')
            .replace(/^&gt; (.+)$/gm, '<blockquote>$1</blockquote>')
            .replace(/\\*\\*(.+?)\\*\\*/g, '<strong>$1</strong>')
            .replace(/\\*(.+?)\\*/g, '<em>$1</em>')
            .replace(/`([^`]+)`/g, '<code>$1</code>')
            .replace(/^[-*] (.+)$/gm, '<li>$1</li>')
            .replace(/\\n\\n/g, '</p><p>');
        return '<p>' + html + '</p>';
    }
}"""

    def css(self) -> str:
        return """
/* Document canvas */
.cr-document {
  max-width: 800px;
  margin: 0 auto;
  padding: 2rem;
  line-height: 1.7;
  color: #24292e;
  background: #fff;
}
.cr-document h1, .cr-document h2, .cr-document h3 {
  margin: 1.5em 0 0.5em;
  font-weight: 600;
  line-height: 1.25;
}
.cr-document h1 { font-size: 2em; }
.cr-document h2 { font-size: 1.5em; }
.cr-document h3 { font-size: 1.25em; }
.cr-document a { color: var(--cr-color-primary); }
.cr-document code {
  padding: 0.2em 0.4em;
  background: #f0f0f0;
  border-radius: 3px;
  font-family: 'Consolas', 'Monaco', monospace;
}
.cr-document blockquote {
  margin: 1em 0;
  padding: 0.5em 1em;
  border-left: 4px solid var(--cr-color-secondary);
  color: #666;
}
.cr-document li { margin: 0.25em 0 0.25em 2em; }
.cr-document p { margin: 0.75em 0; }

/* WeChat official account */
.cr-document[data-platform="wechat"] {
  font-family: -apple-system, BlinkMacSystemFont, "Microsoft YaHei", sans-serif;
  font-size: 15px;
  line-height: 1.75;
  color: #333;
}
.cr-document[data-platform="wechat"] h1,
.cr-document[data-platform="wechat"] h2,
.cr-document[data-platform="wechat"] h3 { text-align: center; }
.cr-document[data-platform="wechat"] p { text-align: justify; text-indent: 2em; }

/* Xiaohongshu note */
.cr-document[data-platform="xiaohongshu"] {
  font-family: -apple-system, BlinkMacSystemFont, "PingFang SC", sans-serif;
  font-size: 16px;
  line-height: 2;
  color: #333;
}
.cr-document[data-platform="xiaohongshu"] h1 { font-size: 20px; }
.cr-document[data-platform="xiaohongshu"] h2 { font-size: 18px; }

/* Zhihu article */
.cr-document[data-platform="zhihu"] {
  font-family: -apple-system, BlinkMacSystemFont, "Helvetica Neue", sans-serif;
  font-size: 16px;
  line-height: 1.8;
  color: #1a1a1a;
}
.cr-document[data-platform="zhihu"] h2 {
  border-bottom: 1px solid #eee;
  padding-bottom: 8px;
}

.cr-document-source {
  max-width: 800px;
  margin: 0 auto;
  padding: 2rem;
  background: #f5f5f5;
  white-space: pre-wrap;
}"""


class CodeRenderer(CanvasRenderer):
    """Source files with a line-number gutter."""

    name = "code"

    def js(self) -> str:
        return """async function(container, content, meta, toolbar) {
    container.className = 'cr-canvas cr-code';
    var gutter = document.createElement('div');
    gutter.className = 'line-numbers';
    var count = content.split('\\n').length;
    for (var i = 1; i <= count; i++) {
        var num = document.createElement('div');
        num.textContent = i;
        gutter.appendChild(num);
    }
    var pre = document.createElement('pre');
    pre.className = 'language-' + meta.fileType;
    pre.textContent = content;
    container.appendChild(gutter);
    container.appendChild(pre);
}"""

    def css(self) -> str:
        return """
/* Code canvas */
.cr-code {
  display: flex;
  min-height: calc(100vh - 40px);
  background: #f5f5f5;
  font-family: 'Consolas', 'Monaco', monospace;
  font-size: 0.9rem;
  line-height: 1.6;
}
.cr-code .line-numbers {
  padding: 1rem 0.75rem 1rem 1rem;
  text-align: right;
  color: #999;
  user-select: none;
  border-right: 1px solid #ddd;
  background: #eee;
}
.cr-code pre { flex: 1; padding: 1rem; overflow-x: auto; }"""


class PosterRenderer(CanvasRenderer):
    """Images shown as a poster with click-to-zoom."""

    name = "poster"

    def js(self) -> str:
        return """async function(container, content, meta, toolbar) {
    container.className = 'cr-canvas cr-poster';
    var img = document.createElement('img');
    img.src = content;
    img.alt = meta.filename;
    img.addEventListener('click', function() { img.classList.toggle('zoomed'); });
    container.appendChild(img);
}"""

    def css(self) -> str:
        return """
/* Poster canvas */
.cr-poster {
  display: flex;
  justify-content: center;
  align-items: flex-start;
  min-height: calc(100vh - 40px);
  background: var(--cr-color-secondary);
  padding: 1rem;
}
.cr-poster img {
  max-width: 100%;
  max-height: calc(100vh - 72px);
  cursor: zoom-in;
  object-fit: contain;
  box-shadow: 0 4px 24px rgba(0, 0, 0, 0.2);
}
.cr-poster img.zoomed { max-width: none; max-height: none; cursor: zoom-out; }"""


def builtin_descriptors() -> list[CanvasDescriptor]:
    """Return fresh descriptors for the built-in canvases."""
    return [
        CanvasDescriptor(
            type="document",
            name="Document",
            icon="📄",
            supported_themes={"social-media", "document", "knowledge", "planning"},
            supported_file_types={"md", "markdown", "txt"},
            renderer=DocumentRenderer(),
        ),
        CanvasDescriptor(
            type="code",
            name="Code",
            icon="💻",
            supported_themes={"general", "knowledge"},
            supported_file_types={
                "py", "js", "ts", "json", "yaml", "yml", "toml", "sh", "css", "html",
            },
            renderer=CodeRenderer(),
        ),
        CanvasDescriptor(
            type="poster",
            name="Poster",
            icon="🖼️",
            supported_themes={"poster", "social-media"},
            supported_file_types={"png", "jpg", "jpeg", "gif", "svg", "webp"},
            renderer=PosterRenderer(),
        ),
    ]


def filter_by_config(
    descriptors: list[CanvasDescriptor], config: CanvasregConfig
) -> list[CanvasDescriptor]:
    """Filter descriptors by the ``canvases:`` config section.

    If ``config.canvases`` is None (absent from YAML), all canvases pass.
    An explicit empty dict also passes everything. Names the config lists
    but no canvas uses are ignored.
    """
    enabled = getattr(config, "canvases", None)
    if enabled is None:
        return descriptors

    return [d for d in descriptors if enabled.get(d.type, True)]


def build_registry(config: CanvasregConfig | None = None) -> CanvasRegistry:
    """Create a registry holding the enabled built-in canvases.

    Args:
        config: Optional configuration; supplies the default canvas type
            and the ``canvases:`` enable/disable map.

    Returns:
        A new, populated CanvasRegistry.
    """
    descriptors = builtin_descriptors()
    if config is None:
        registry = CanvasRegistry()
    else:
        registry = CanvasRegistry(default_type=config.default_canvas)
        descriptors = filter_by_config(descriptors, config)

    registry.register_all(descriptors)
    return registry

"""
Markdown to HTML rendering and the page template used for printing.
"""

import html
import re
from typing import Optional, Tuple

import markdown

from ..models import ConversionSettings


MERMAID_FENCE_RE = re.compile(r"^```mermaid[ \t]*\r?\n(.*?)\r?\n```[ \t]*$", re.DOTALL | re.MULTILINE)
FIRST_HEADING_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)

MARKDOWN_EXTENSIONS = ["toc", "tables", "fenced_code", "sane_lists", "nl2br"]

MERMAID_SCRIPT = """
  <script src="https://cdn.jsdelivr.net/npm/mermaid/dist/mermaid.min.js"></script>
  <script>mermaid.initialize({ startOnLoad: true });</script>"""

PAGE_STYLE = """
    body { font-family: sans-serif; padding: 2em; }
    pre, code {
      background: #f0f0f0;
      padding: 0.5em;
      border-radius: 5px;
      font-family: 'Fira Mono', 'Consolas', 'Menlo', monospace;
      font-size: 0.95em;
      overflow-x: auto;
      white-space: pre;
      word-break: break-word;
      line-height: 1.5;
    }
    img { max-width: 100%; height: auto; }
    .mermaid { text-align: center; margin: 2em auto; }
    .toc { margin: 1em 0 2em; }
    table { width: 100%; border-collapse: collapse; margin: 1em 0; }
    table, th, td { border: 1px solid #ccc; }
    th, td { padding: 8px 12px; text-align: left; }
    thead { background: #f9f9f9; }"""


def replace_mermaid_blocks(markdown_text: str) -> Tuple[str, int]:
    """
    Turn fenced mermaid code blocks into ``<div class="mermaid">`` blocks.

    Returns:
        The rewritten text and the number of diagrams found
    """
    def replace(match: re.Match) -> str:
        return f'\n<div class="mermaid">\n{html.escape(match.group(1))}\n</div>\n'

    return MERMAID_FENCE_RE.subn(replace, markdown_text)


def render_markdown(markdown_text: str, settings: Optional[ConversionSettings] = None) -> Tuple[str, bool]:
    """
    Render a document body to HTML.

    The table of contents is generated from level 2+ headings and replaces the
    configured marker (``[[toc]]`` by default).

    Returns:
        The HTML body and whether it contains diagrams
    """
    settings = settings or ConversionSettings()
    text, diagram_count = replace_mermaid_blocks(markdown_text)
    body = markdown.markdown(
        text,
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"toc": {"marker": settings.toc_marker, "toc_depth": "2-6"}},
    )
    return body, diagram_count > 0


def document_title(markdown_text: str, fallback: str) -> str:
    match = FIRST_HEADING_RE.search(markdown_text)
    return match.group(1) if match else fallback


def build_page(body_html: str, title: str = "Blog", include_diagrams: bool = False) -> str:
    """Wrap rendered HTML in the print template."""
    scripts = MERMAID_SCRIPT if include_diagrams else ""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{html.escape(title)}</title>
  <style>{PAGE_STYLE}
  </style>{scripts}
</head>
<body>
{body_html}
</body>
</html>
"""

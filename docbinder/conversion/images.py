"""
Image reference fix-up for Markdown documents.

The rendering engine receives the document as an in-memory HTML string with no
base URL, so relative image paths would not resolve. Local images are
therefore embedded: raster images as base64 data URIs, SVG files as inline
markup. Data URIs and remote images are left as they are.
"""

import base64
import html
import logging
import re
from pathlib import Path
from typing import Union


IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")

RASTER_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
SVG_EXTENSION = ".svg"


def is_local_reference(src: str) -> bool:
    """True for relative filesystem references (no URL scheme, not absolute, not an anchor)."""
    return not (SCHEME_RE.match(src) or src.startswith(("/", "#")))


def is_own_line(text: str, start: int, end: int) -> bool:
    """True when ``text[start:end]`` has only whitespace around it on its line."""
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    if line_end == -1:
        line_end = len(text)
    return not text[line_start:start].strip() and not text[end:line_end].strip()


def fix_image_paths(markdown_text: str, document_path: Union[str, Path]) -> str:
    """
    Embed local images referenced by a Markdown document.

    Args:
        markdown_text: Document source
        document_path: Location of the document; references resolve against its directory

    Returns:
        The document with local PNG/JPEG/GIF/WebP images as data URIs and SVG
        images inlined; every other reference is unchanged
    """
    base_dir = Path(document_path).parent

    def replace(match: re.Match) -> str:
        alt, target = match.group(1), match.group(2).strip()
        # ![alt](path "title"): only the path part is resolved
        src = target.split()[0] if target else target
        if not src or not is_local_reference(src):
            return match.group(0)

        image_path = (base_dir / src).resolve()
        ext = image_path.suffix.lower()
        if ext not in RASTER_MIME_TYPES and ext != SVG_EXTENSION:
            return match.group(0)
        if not image_path.is_file():
            logging.debug(f"Image not found, leaving reference as is: {image_path}")
            return match.group(0)

        try:
            if ext == SVG_EXTENSION:
                svg_content = image_path.read_text(encoding='utf-8')
                figure = f'<div role="img" aria-label="{html.escape(alt)}">{svg_content}</div>'
                # Only an image alone on its line becomes its own block
                if is_own_line(markdown_text, match.start(), match.end()):
                    return f"\n{figure}\n"
                return figure
            encoded = base64.b64encode(image_path.read_bytes()).decode('ascii')
            return f"![{alt}](data:{RASTER_MIME_TYPES[ext]};base64,{encoded})"
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Failed to embed image: {src} - {e}")
            return match.group(0)

    return IMAGE_RE.sub(replace, markdown_text)

"""
Single-document conversion: Markdown in, PDF out.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from ..errors import ConversionError, MissingResourceError
from ..models import ConversionSettings
from .engine import ChromiumEngine, RenderEngine
from .images import fix_image_paths
from .markup import build_page, document_title, render_markdown


class ConversionWorker:
    """
    Renders Markdown documents to PDF through a RenderEngine.

    The worker keeps no per-document state, so one instance can serve every
    concurrent conversion of a run.
    """

    def __init__(self, settings: Optional[ConversionSettings] = None,
                 engine: Optional[RenderEngine] = None):
        """
        Initialize the conversion worker.

        Args:
            settings: Rendering options
            engine: Engine used to print pages (defaults to ChromiumEngine)
        """
        self.settings = settings or ConversionSettings()
        self.engine = engine or ChromiumEngine(self.settings)

    def prepare_html(self, source: Path) -> Tuple[str, bool]:
        """
        Build the printable HTML page for a document.

        Returns:
            The page and whether it contains diagrams

        Raises:
            MissingResourceError: If the document does not exist
        """
        if not source.is_file():
            raise MissingResourceError("Missing file", source)

        raw = source.read_text(encoding='utf-8')
        text = fix_image_paths(raw, source)
        body, has_diagrams = render_markdown(text, self.settings)
        page = build_page(body, document_title(raw, source.stem), include_diagrams=has_diagrams)
        return page, has_diagrams

    async def render(self, source: Union[str, Path], target: Union[str, Path]) -> Path:
        """
        Convert one document to PDF.

        Args:
            source: Markdown document
            target: PDF to write; parent directories are created

        Returns:
            The written PDF path

        Raises:
            MissingResourceError: If the document does not exist
            ConversionError: If reading or rendering fails
        """
        source, target = Path(source), Path(target)
        try:
            page, has_diagrams = self.prepare_html(source)
        except (OSError, UnicodeDecodeError) as e:
            raise ConversionError("Could not read document", source, e) from e

        target.parent.mkdir(parents=True, exist_ok=True)
        logging.debug(f"Rendering HTML for: {source}")
        try:
            diagrams_ready = await self.engine.print_pdf(page, target, wait_for_diagrams=has_diagrams)
        except Exception as e:
            raise ConversionError("Rendering engine failed", source, e) from e

        if not diagrams_ready:
            logging.warning(f"Mermaid diagram may not have rendered in: {source}")
        return target

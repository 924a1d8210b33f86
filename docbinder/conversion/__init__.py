"""Document conversion: Markdown to PDF rendering, scheduling and merging."""

from .images import fix_image_paths
from .markup import render_markdown, build_page
from .engine import RenderEngine, ChromiumEngine
from .worker import ConversionWorker
from .scheduler import chunked, run_chunked
from .merger import ArtifactMerger

__all__ = [
    "fix_image_paths",
    "render_markdown",
    "build_page",
    "RenderEngine",
    "ChromiumEngine",
    "ConversionWorker",
    "chunked",
    "run_chunked",
    "ArtifactMerger"
]

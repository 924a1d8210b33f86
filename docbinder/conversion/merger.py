"""
Merging of rendered PDFs into one combined document.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError


class ArtifactMerger:
    """
    Concatenates PDFs, in the order given, into a single file.
    """

    def __init__(self, target: Union[str, Path]):
        """
        Initialize the merger.

        Args:
            target: Path of the combined PDF
        """
        self.target = Path(target)

    def merge(self, pdf_paths: Iterable[Union[str, Path]]) -> Optional[Path]:
        """
        Write the combined PDF.

        Args:
            pdf_paths: Successfully rendered PDFs in traversal order

        Returns:
            The combined PDF path, or None when there was nothing to merge
        """
        writer = PdfWriter()
        merged_count = 0

        for pdf_path in pdf_paths:
            try:
                reader = PdfReader(str(pdf_path))
                for page in reader.pages:
                    writer.add_page(page)
                merged_count += 1
            except (OSError, ValueError, PyPdfError) as e:
                logging.warning(f"Could not merge {pdf_path}: {e}")

        if merged_count == 0:
            logging.warning("No PDFs to merge; combined file not written")
            return None

        self.target.parent.mkdir(parents=True, exist_ok=True)
        with open(self.target, 'wb') as f:
            writer.write(f)
        logging.info(f"Merged {merged_count} PDFs into {self.target}")
        return self.target

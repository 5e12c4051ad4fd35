from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .errors import ParseError, ParsingError, RenderError
from .markdown_parser import parse_markdown
from .renderer_html import render_document
from .utils import read_markdown, write_fragments

logger = logging.getLogger(__name__)


def markdown_to_html(text: str) -> List[str]:
    """Convert markdown text into HTML fragments, one per top-level block."""
    try:
        document = parse_markdown(text)
        return render_document(document)
    except (ParseError, RenderError) as exc:
        raise ParsingError(str(exc)) from exc


def parse_to_console(text: str, stream: Optional[TextIO] = None) -> None:
    out = stream if stream is not None else sys.stdout
    for fragment in markdown_to_html(text):
        print(fragment, file=out)


def md_to_html_file(input_path: str | Path, output_path: str | Path) -> None:
    input_path = Path(input_path)
    output_path = Path(output_path)
    markdown_text = read_markdown(input_path)
    logger.debug("Markdown length: %d chars", len(markdown_text))
    # Convert fully before touching the output so a failure leaves no partial file.
    fragments = markdown_to_html(markdown_text)
    write_fragments(output_path, fragments)
    logger.debug("Wrote %d fragments to %s", len(fragments), output_path)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from .errors import DocumentIOError


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def resolve_output_path(input_path: Path, output: Optional[str]) -> Path:
    if output:
        out_path = Path(output)
        if out_path.is_dir():
            out_path = out_path / f"{input_path.stem}.html"
        return out_path
    return input_path.with_suffix(".html")


def read_markdown(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentIOError(f"Cannot read {path}: {exc}") from exc


def write_fragments(path: Path, fragments: Iterable[str]) -> None:
    """Write one HTML fragment per line."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            for fragment in fragments:
                handle.write(fragment)
                handle.write("\n")
    except OSError as exc:
        raise DocumentIOError(f"Cannot write {path}: {exc}") from exc

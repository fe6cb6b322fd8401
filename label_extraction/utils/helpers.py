"""Small filesystem and text helpers shared across the pipeline."""

import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Union

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create ``path`` (and parents) if missing and return it as a Path."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def generate_timestamp(format_str: str = TIMESTAMP_FORMAT) -> str:
    return datetime.now().strftime(format_str)


def page_filename(page_number: int) -> str:
    """
    Filename for one page split out of a manifest.

    The page number comes first so a directory listing stays readable; the
    timestamp and random suffix keep repeated splits into the same folder
    from overwriting each other, e.g. ``page-3-20260129145424-1f0c2a9e4b7d.pdf``.
    """
    stamp = generate_timestamp("%Y%m%d%H%M%S")
    return f"page-{page_number}-{stamp}-{uuid.uuid4().hex[:12]}.pdf"


def normalize_lines(text: str) -> List[str]:
    """Label text as stripped lines with blank lines removed."""
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line]

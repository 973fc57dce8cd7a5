"""Writing the bundle to disk."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_output_dir(output_dir: Path) -> Path:
    """Create the output directory and any missing parents.

    Succeeds when the directory already exists.
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        logger.debug(f"[output] creating {output_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def write_bundle(output_path: Path, content: str, encoding: str = "utf-8") -> Path:
    """Write bundle content, replacing any previous file.

    Newlines are written exactly as they appear in content so repeated runs
    produce byte-identical files on every platform.

    Returns:
        The path written to
    """
    output_path = Path(output_path)
    output_path.write_text(content, encoding=encoding, newline="")
    logger.debug(f"[output] wrote {len(content)} characters to {output_path}")
    return output_path

"""Build pipeline: ensure_dir -> bundle -> write.

Any failure aborts the run. The output file is written only after bundling
succeeds, so a failed run never creates or modifies it; an output directory
created before the failure is left in place.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .bundler import Bundler
from .bundler import BundleResult
from .config import BundleConfig
from .output import ensure_output_dir
from .output import write_bundle

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a successful build."""

    output_path: Path
    bundle: BundleResult


def run_build(config: BundleConfig, bundler: Bundler | None = None) -> BuildResult:
    """Bundle config.entry into config.output_path.

    Args:
        config: Run configuration
        bundler: Bundler to use instead of one built from config

    Returns:
        BuildResult with the written path and bundle details

    Raises:
        BundleError: Resolution, syntax or configuration failure
        OSError: Entry unreadable or output unwritable
    """
    bundler = bundler or Bundler.from_config(config)

    ensure_output_dir(config.output_dir)
    result = bundler.bundle(config.entry)
    output_path = write_bundle(config.output_path, result.content, encoding=config.encoding)

    logger.info(f"[build] bundled {config.entry} -> {output_path}")
    return BuildResult(output_path=output_path, bundle=result)

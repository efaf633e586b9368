"""Export the current preview image to disk."""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from pyqt_previewsync.state.preview_result import PreviewResult

logger = logging.getLogger(__name__)


def image_file_name(result: PreviewResult, prefix: str, timestamp_ms: Optional[int] = None) -> str:
    """``<prefix>-<epoch ms>.<webp|gif>``"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{prefix}-{timestamp_ms}.{result.image_format.value}"


def export_image(
    result: PreviewResult,
    directory: Union[str, Path],
    prefix: str = "preview",
    timestamp_ms: Optional[int] = None,
) -> Path:
    """
    Write the preview image bytes to directory.

    Args:
        result: Preview to export
        directory: Target directory (created if missing)
        prefix: File name prefix
        timestamp_ms: Timestamp used in the file name (defaults to now)

    Returns:
        Path of the written file

    Raises:
        ValueError: If no image has been rendered yet
    """
    if not result.has_image:
        raise ValueError("No preview image to export")

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / image_file_name(result, prefix, timestamp_ms)
    path.write_bytes(result.image_bytes)
    logger.info(f"Exported preview image to {path}")
    return path

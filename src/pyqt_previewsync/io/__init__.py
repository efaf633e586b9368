"""File import/export for configs and preview images."""

from .config_file import dump_config, parse_config, load_config_file, save_config_file
from .image_export import export_image, image_file_name

__all__ = [
    "dump_config",
    "parse_config",
    "load_config_file",
    "save_config_file",
    "export_image",
    "image_file_name",
]

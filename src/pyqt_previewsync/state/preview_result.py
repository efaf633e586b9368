"""Value types produced by the backend: preview images and handler options."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Mapping, Sequence

from pyqt_previewsync.exceptions import HandlerError


class ImageFormat(Enum):
    WEBP = "webp"
    GIF = "gif"

    @classmethod
    def from_wire(cls, raw: str) -> "ImageFormat":
        return cls.GIF if raw == cls.GIF.value else cls.WEBP


@dataclass(frozen=True)
class PreviewResult:
    """The rendered preview currently on display."""
    image_bytes: bytes = b""
    image_format: ImageFormat = ImageFormat.WEBP
    width: int = 64
    height: int = 32
    title: str = "Pixlet"
    is2x: bool = False  # backend rendered at double resolution
    loading: bool = False

    @property
    def has_image(self) -> bool:
        return bool(self.image_bytes)

    def with_loading(self, loading: bool) -> "PreviewResult":
        return replace(self, loading=loading)


@dataclass(frozen=True)
class HandlerOption:
    """One entry of a dynamic option list."""
    value: str
    display: str


def normalize_options(raw: Any) -> List[HandlerOption]:
    """Turn a handler's return value into an ordered list of HandlerOption.

    Accepts HandlerOption instances or mappings with ``value`` and ``display``.

    Raises:
        HandlerError: If the payload is not a sequence of options
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise HandlerError(f"Handler returned {type(raw).__name__}, expected a list of options")

    options: List[HandlerOption] = []
    for item in raw:
        if isinstance(item, HandlerOption):
            options.append(item)
        elif isinstance(item, Mapping) and "value" in item:
            value = str(item["value"])
            options.append(HandlerOption(value=value, display=str(item.get("display", value))))
        else:
            raise HandlerError(f"Malformed handler option: {item!r}")
    return options

"""Listing of missing GStreamer elements the user may install."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TITLE = (
    "Please install one of the following GStreamer plugins by clicking below"
)
DESKTOP_ID = "org.gnome.NetworkDisplays"

_DESCRIPTIONS = {
    # video encoders
    "openh264enc": "GStreamer OpenH264 video encoder ({})",
    "x264enc": "GStreamer x264 video encoder ({})",
    "vah264enc": "GStreamer VA H264 video encoder ({})",
    "vaapih264enc": "GStreamer VA-API H264 video encoder ({})",
    "vp8enc": "GStreamer On2 VP8 video encoder ({})",
    "vp9enc": "GStreamer On2 VP9 video encoder ({})",
    # audio encoders
    "fdkaacenc": "GStreamer FDK AAC audio encoder ({})",
    "avenc_aac": "GStreamer libav AAC audio encoder ({})",
    "faac": "GStreamer Free AAC audio encoder ({})",
    "vorbisenc": "GStreamer Vorbis audio encoder ({})",
    "opusenc": "GStreamer Opus audio encoder ({})",
    # muxers
    "webmmux": "GStreamer WebM muxer ({})",
    "matroskamux": "GStreamer Matroska muxer ({})",
    "mpegtsmux": "GStreamer MPEG Transport Stream muxer ({})",
}


def describe_codec(codec: str) -> str:
    """Human-readable description of a GStreamer element."""
    template = _DESCRIPTIONS.get(codec)
    if template is None:
        return f"GStreamer Element “{codec}”"
    return template.format(codec)


def installer_resource(description: str, codec: str) -> str:
    """Resource string a software installer uses to find the element's package."""
    bits = struct.calcsize("P") * 8
    return f"{description}|gstreamer1(element-{codec})()({bits}bit)"


@dataclass(frozen=True)
class CodecRow:
    """One listed element and its description."""

    codec: str
    description: str

    @property
    def resource(self) -> str:
        """The installer resource for this element."""
        return installer_resource(self.description, self.codec)


class CodecInstall:
    """Titled list of missing elements; visible only when the list is non-empty."""

    def __init__(
        self,
        codecs: Optional[Iterable[str]] = None,
        title: str = DEFAULT_TITLE,
    ) -> None:
        self.title = title
        self.visible = True
        self._codecs: Optional[list[str]] = []
        if codecs is not None:
            self.codecs = codecs

    @property
    def codecs(self) -> Optional[list[str]]:
        """The names of the required elements."""
        return None if self._codecs is None else list(self._codecs)

    @codecs.setter
    def codecs(self, codecs: Optional[Iterable[str]]) -> None:
        self._codecs = None if codecs is None else list(codecs)
        self._update()

    def _update(self) -> None:
        if self._codecs is None:
            logger.warning("codec list not initialized")
            return
        self.visible = len(self._codecs) > 0

    def rows(self) -> list[CodecRow]:
        """A row for every listed element, in list order."""
        return [CodecRow(codec, describe_codec(codec)) for codec in self._codecs or []]
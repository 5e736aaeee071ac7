"""
Meme compositor service.

Burns classic top/bottom captions into an uploaded image:
1. Read the source dimensions (800x600 when the metadata has none).
2. Scale font and stroke from the image width.
3. Describe both captions as a resolution-independent text layer.
4. Rasterize the layer with Pillow and composite it over the image.
5. Flatten and re-encode as JPEG.

Every request runs the full decode -> render -> encode pipeline; nothing
is cached between requests.
"""

import logging
import os
from functools import lru_cache
from io import BytesIO
from typing import Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel

from meme_captioner.config import Settings, get_settings
from meme_captioner.schemas.meme import MemeRequest

# Configure logging
logger = logging.getLogger(__name__)

# Distance in pixels between each caption baseline and the nearest edge
EDGE_MARGIN = 20

FILL_COLOR = "white"
STROKE_COLOR = "black"
FONT_FAMILY = "Impact, Arial Black, sans-serif"

CaptionFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class CompositorError(Exception):
    """Base exception for compositor errors."""
    pass


class CompositionError(CompositorError):
    """Raised when the image engine fails to decode, composite or encode."""
    pass


# =============================================================================
# GEOMETRY
# =============================================================================

def escape_xml(text: str) -> str:
    """Escape the characters that are special in SVG/XML markup."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def caption_metrics(width: int) -> Tuple[int, int]:
    """
    Derive caption font size and stroke width from the image width.

    Args:
        width: Source image width in pixels

    Returns:
        (font_size, stroke_width) in pixels
    """
    font_size = width // 12
    stroke_width = font_size // 10
    return font_size, stroke_width


def resolve_dimensions(
    width: Optional[int],
    height: Optional[int],
    default_width: int = 800,
    default_height: int = 600,
) -> Tuple[int, int]:
    """Fall back to the default size for any dimension the metadata lacks."""
    return (width or default_width), (height or default_height)


def _format_number(value: float) -> str:
    return format(value, "f").rstrip("0").rstrip(".")


class CaptionLine(BaseModel):
    """One centered caption line, anchored at its baseline."""
    text: str
    x: float
    y: int


class CaptionLayer(BaseModel):
    """
    Vector description of the caption overlay.

    The same geometry serializes to SVG markup and rasterizes to an RGBA
    layer the size of the source image.
    """
    width: int
    height: int
    font_size: int
    stroke_width: int
    top: CaptionLine
    bottom: CaptionLine

    @property
    def lines(self) -> Tuple[CaptionLine, CaptionLine]:
        return self.top, self.bottom

    def to_svg(self) -> str:
        """Serialize the layer as an SVG document with escaped caption text."""
        texts = "\n".join(
            f'  <text x="{_format_number(line.x)}" y="{line.y}" class="title">{escape_xml(line.text)}</text>'
            for line in self.lines
        )
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" height="{self.height}">\n'
            "  <style>\n"
            "    .title {\n"
            f"      fill: {FILL_COLOR};\n"
            f"      font-size: {self.font_size}px;\n"
            "      font-weight: 900;\n"
            f"      font-family: {FONT_FAMILY};\n"
            "      text-transform: uppercase;\n"
            "      text-anchor: middle;\n"
            "      paint-order: stroke;\n"
            f"      stroke: {STROKE_COLOR};\n"
            f"      stroke-width: {self.stroke_width}px;\n"
            "      stroke-linejoin: round;\n"
            "    }\n"
            "  </style>\n"
            f"{texts}\n"
            "</svg>\n"
        )

    def rasterize(self, font: CaptionFont) -> Image.Image:
        """
        Render the layer onto a transparent RGBA image.

        SVG strokes are centered on the glyph edge and half of the stroke is
        painted over by the fill, so only half the width shows outside the
        glyph. Pillow strokes grow outward only, hence the halving here.
        """
        layer = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        outline = (self.stroke_width + 1) // 2

        for line in self.lines:
            if not line.text:
                continue
            # Pillow paints the stroke first and the fill on top of it
            draw.text(
                (line.x, line.y),
                line.text,
                font=font,
                fill=FILL_COLOR,
                stroke_width=outline,
                stroke_fill=STROKE_COLOR,
                anchor="ms",
            )
        return layer


def build_caption_layer(width: int, height: int, top_text: str, bottom_text: str) -> CaptionLayer:
    """
    Lay out the top and bottom captions for an image of the given size.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        top_text: Caption for the top line (may be empty)
        bottom_text: Caption for the bottom line (may be empty)

    Returns:
        CaptionLayer: Uppercased, centered, baseline-anchored caption lines
    """
    font_size, stroke_width = caption_metrics(width)
    center = width / 2
    return CaptionLayer(
        width=width,
        height=height,
        font_size=font_size,
        stroke_width=stroke_width,
        top=CaptionLine(text=top_text.upper(), x=center, y=font_size + EDGE_MARGIN),
        bottom=CaptionLine(text=bottom_text.upper(), x=center, y=height - EDGE_MARGIN),
    )


# =============================================================================
# FONTS
# =============================================================================

@lru_cache(maxsize=8)
def _find_font_path(candidates: Tuple[str, ...]) -> Optional[str]:
    for path in candidates:
        if path and os.path.exists(path):
            return path
    return None


def load_caption_font(size: int, candidates: Tuple[str, ...]) -> CaptionFont:
    """
    Load the bold caption font at the given pixel size.

    Falls back to Pillow's bundled scalable font when none of the
    candidate TrueType files exist.
    """
    size = max(size, 1)
    font_path = _find_font_path(candidates)
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as e:
            logger.warning(f"Could not load font {font_path}: {e}. Using default font.")
    return ImageFont.load_default(size=size)


# =============================================================================
# SERVICE
# =============================================================================

class MemeCompositor:
    """
    Service that overlays top/bottom captions onto an image and returns JPEG bytes.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the compositor.

        Args:
            settings: Optional settings instance. If not provided, uses default settings.
        """
        self.settings = settings or get_settings()

    def compose(self, image: bytes, top_text: str, bottom_text: str) -> bytes:
        """
        Composite the captions over the image and encode the result.

        Args:
            image: Raw JPEG/PNG/WebP bytes
            top_text: Top caption (may be empty)
            bottom_text: Bottom caption (may be empty)

        Returns:
            JPEG bytes with the same pixel dimensions as the source

        Raises:
            CompositionError: If the image cannot be decoded, composited or encoded
        """
        try:
            with Image.open(BytesIO(image)) as source:
                source.load()
                width, height = resolve_dimensions(
                    *source.size,
                    default_width=self.settings.DEFAULT_IMAGE_WIDTH,
                    default_height=self.settings.DEFAULT_IMAGE_HEIGHT,
                )
                layer = build_caption_layer(width, height, top_text, bottom_text)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Caption layer markup:\n%s", layer.to_svg())

                font = load_caption_font(layer.font_size, tuple(self.settings.font_paths_list))
                overlay = layer.rasterize(font)
                if overlay.size != source.size:
                    overlay = overlay.crop((0, 0) + source.size)

                # Flatten transparency onto black, then lay the captions on top
                canvas = Image.new("RGBA", source.size, (0, 0, 0, 255))
                canvas.alpha_composite(source.convert("RGBA"))
                canvas.alpha_composite(overlay, dest=(0, 0))

            output = BytesIO()
            canvas.convert("RGB").save(output, format="JPEG", quality=self.settings.JPEG_QUALITY)
        except Exception as e:
            logger.error(f"Error processing image: {e}", exc_info=True)
            raise CompositionError(f"Failed to composite captions: {e}") from e

        result = output.getvalue()
        logger.info(
            f"Composited meme {width}x{height} "
            f"(font={layer.font_size}px, stroke={layer.stroke_width}px), "
            f"{len(image)} -> {len(result)} bytes"
        )
        return result

    def compose_request(self, request: MemeRequest) -> bytes:
        """Composite a validated MemeRequest."""
        return self.compose(request.image, request.top_text, request.bottom_text)


# Convenience function for dependency injection
def get_compositor() -> MemeCompositor:
    """Get a MemeCompositor instance for dependency injection."""
    return MemeCompositor()

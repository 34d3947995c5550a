# utils/placeholder.py
"""Local placeholder card used when remote image generation fails."""

from __future__ import annotations

import base64
from io import BytesIO

import numpy as np
from PIL import Image, ImageDraw, ImageFont

PLACEHOLDER_SIZES: dict[str, tuple[int, int]] = {
    "4:5": (400, 500),
    "1:1": (400, 400),
    "9:16": (360, 640),
}

_GRADIENTS: dict[str, tuple[str, str]] = {
    "COVER": ("#2D1B4E", "#4A2D7A"),
    "OUTRO": ("#4A2D7A", "#7C3AED"),
    "BODY": ("#F7F8FA", "#E5E8EB"),
}

PLACEHOLDER_CAPTION = "Demo image"


def _hex_to_rgb(value: str) -> np.ndarray:
    value = value.lstrip("#")
    return np.array([int(value[i : i + 2], 16) for i in (0, 2, 4)], dtype=np.float32)


def _diagonal_gradient(size: tuple[int, int], start: str, end: str) -> Image.Image:
    width, height = size
    xs = np.linspace(0.0, 1.0, width, dtype=np.float32)
    ys = np.linspace(0.0, 1.0, height, dtype=np.float32)
    t = (xs[np.newaxis, :] + ys[:, np.newaxis]) / 2.0
    c0, c1 = _hex_to_rgb(start), _hex_to_rgb(end)
    pixels = c0 * (1.0 - t[..., np.newaxis]) + c1 * t[..., np.newaxis]
    return Image.fromarray(pixels.round().astype(np.uint8))


def _font(size: int) -> ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def _draw_centered(
    draw: ImageDraw.ImageDraw,
    text: str,
    center: tuple[float, float],
    font: ImageFont.ImageFont,
    fill: tuple[int, ...],
) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = center[0] - (right - left) / 2
    y = center[1] - (bottom - top) / 2
    draw.text((x, y), text, font=font, fill=fill)


def render_placeholder(page_type: str, label: str, aspect_ratio: str) -> Image.Image:
    size = PLACEHOLDER_SIZES.get(aspect_ratio, PLACEHOLDER_SIZES["4:5"])
    start, end = _GRADIENTS.get(page_type, _GRADIENTS["BODY"])
    image = _diagonal_gradient(size, start, end).convert("RGBA")

    is_body = page_type not in ("COVER", "OUTRO")
    title_fill = (26, 30, 39, 255) if is_body else (255, 255, 255, 255)
    caption_fill = (136, 141, 150, 255) if is_body else (255, 255, 255, 153)

    overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    w, h = image.size
    _draw_centered(draw, label, (w / 2, h / 2 - 10), _font(20), title_fill)
    _draw_centered(draw, PLACEHOLDER_CAPTION, (w / 2, h / 2 + 20), _font(14), caption_fill)
    return Image.alpha_composite(image, overlay).convert("RGB")


def create_placeholder_image(page_type: str, label: str, aspect_ratio: str) -> str:
    """Render a placeholder card and return it as a PNG data URI."""
    buffer = BytesIO()
    render_placeholder(page_type, label, aspect_ratio).save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"

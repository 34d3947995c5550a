# tests/test_placeholder.py
import base64
from io import BytesIO

import pytest
from PIL import Image

from utils.placeholder import create_placeholder_image, render_placeholder


@pytest.mark.parametrize(
    "ratio, size",
    [("4:5", (400, 500)), ("1:1", (400, 400)), ("9:16", (360, 640)), ("3:2", (400, 500))],
)
def test_render_placeholder_size(ratio, size):
    assert render_placeholder("BODY", "Body 1", ratio).size == size


def test_cover_placeholder_is_dark():
    image = render_placeholder("COVER", "Cover", "1:1")
    r, g, b = image.getpixel((0, 0))
    assert (r, g, b) == (0x2D, 0x1B, 0x4E)


def test_create_placeholder_image_is_png_data_uri():
    uri = create_placeholder_image("OUTRO", "Closing", "9:16")
    header, _, payload = uri.partition(",")
    assert header == "data:image/png;base64"
    image = Image.open(BytesIO(base64.b64decode(payload)))
    assert image.format == "PNG"
    assert image.size == (360, 640)

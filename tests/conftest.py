"""Shared fixtures: real JPEG bytes and fragment corpora on disk."""

import base64
import io

import numpy as np
import pytest
from PIL import Image


def make_jpeg(width: int = 16, height: int = 8, color=(200, 30, 30), noise: bool = False) -> bytes:
    if noise:
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        img = Image.fromarray(pixels, "RGB")
    else:
        img = Image.new("RGB", (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=90)
    return buf.getvalue()


def wrap_base64(data: bytes, line_length: int = 76) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(
        encoded[i : i + line_length] for i in range(0, len(encoded), line_length)
    )


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def write_fragments(tmp_path):
    """Write ``{name: text}`` into ``tmp_path`` and return the directory."""

    def _write(fragments):
        for name, text in fragments.items():
            (tmp_path / name).write_text(text, encoding="utf-8")
        return tmp_path

    return _write

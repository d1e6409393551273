from __future__ import annotations

import base64
import io
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PIL import Image

from predial.tools.images import prepare_image


def _encoded(size: tuple[int, int], mode: str = "RGB", fmt: str = "PNG") -> str:
    buf = io.BytesIO()
    Image.new(mode, size).save(buf, fmt)
    return base64.b64encode(buf.getvalue()).decode("ascii")


class PrepareImageTests(unittest.TestCase):
    def test_small_image_passes_through(self) -> None:
        data = _encoded((10, 20))
        self.assertEqual(prepare_image(data, "image/png", max_side=100), (data, "image/png"))

    def test_large_image_scaled_to_jpeg(self) -> None:
        data, mime_type = prepare_image(_encoded((400, 200), mode="RGBA"), "image/png", max_side=100)

        self.assertEqual(mime_type, "image/jpeg")
        with Image.open(io.BytesIO(base64.b64decode(data))) as img:
            self.assertEqual(img.size, (100, 50))
            self.assertEqual(img.format, "JPEG")

    def test_not_base64(self) -> None:
        with self.assertRaises(ValueError):
            prepare_image("@@@", "image/png")

    def test_not_an_image(self) -> None:
        with self.assertRaises(ValueError):
            prepare_image(base64.b64encode(b"texto qualquer").decode("ascii"), "image/png")


if __name__ == "__main__":
    unittest.main()

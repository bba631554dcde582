"""
测试图片构造工具
"""

import io

from PIL import Image


def make_image_bytes(
    width: int = 64,
    height: int = 48,
    image_format: str = "PNG",
    mode: str = "RGB",
    color=(200, 120, 40)
) -> bytes:
    """用 Pillow 合成一张纯色图片"""
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 128)
    image = Image.new(mode, (width, height), color)
    output = io.BytesIO()
    image.save(output, format=image_format)
    return output.getvalue()


def open_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image

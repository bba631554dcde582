"""
图片规范化器单元测试
测试图片均由 Pillow 现场合成
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from chongyang.core.image import (
    ImageNormalizer,
    ResizeFit,
    ResizeOptions,
    UnsupportedInputError,
    declared_extension,
    parse_size_directive,
)
from tests.utils.image_utils import make_image_bytes, open_image


@pytest.mark.unit
@pytest.mark.images
class TestParseSizeDirective:
    """尺寸指令解析测试类"""

    def test_valid_directive(self):
        assert parse_size_directive("1440x2560") == ResizeOptions(1440, 2560, ResizeFit.COVER)

    def test_case_insensitive(self):
        assert parse_size_directive("800X600") == ResizeOptions(800, 600, ResizeFit.COVER)

    @pytest.mark.parametrize("size", [None, "", "2K", "abcxdef", "100x", "x100", "0x100", "1024*1024", "-5x10"])
    def test_malformed_returns_none(self, size):
        """格式错误时静默返回 None"""
        assert parse_size_directive(size) is None


@pytest.mark.unit
@pytest.mark.images
class TestReencode:
    """重编码测试类"""

    def test_reencode_to_webp(self, normalizer, png_bytes):
        result = normalizer.reencode(png_bytes, "webp", quality=80)

        image = open_image(result)
        assert image.format == "WEBP"
        assert image.size == (64, 48)

    def test_reencode_keeps_alpha_for_webp(self, normalizer):
        data = make_image_bytes(32, 32, "PNG", mode="RGBA")

        image = open_image(normalizer.reencode(data, "webp"))
        assert image.mode == "RGBA"

    def test_reencode_rgba_to_jpeg(self, normalizer):
        """JPEG不支持透明通道，转换为RGB"""
        data = make_image_bytes(32, 32, "PNG", mode="RGBA")

        image = open_image(normalizer.reencode(data, "jpeg", quality=90))
        assert image.format == "JPEG"
        assert image.mode == "RGB"

    def test_cover_resize_exact_size(self, normalizer, png_bytes):
        """居中裁剪填满目标尺寸"""
        result = normalizer.reencode(png_bytes, "webp", resize=ResizeOptions(20, 20, ResizeFit.COVER))
        assert open_image(result).size == (20, 20)

    def test_contain_resize_pads(self, normalizer, png_bytes):
        result = normalizer.reencode(png_bytes, "png", resize=ResizeOptions(40, 40, ResizeFit.CONTAIN))
        assert open_image(result).size == (40, 40)

    def test_inside_resize_keeps_ratio(self, normalizer, png_bytes):
        result = normalizer.reencode(png_bytes, "png", resize=ResizeOptions(32, 32, ResizeFit.INSIDE))
        assert open_image(result).size == (32, 24)

    def test_fill_resize_stretches(self, normalizer, png_bytes):
        result = normalizer.reencode(png_bytes, "png", resize=ResizeOptions(10, 30, ResizeFit.FILL))
        assert open_image(result).size == (10, 30)

    def test_single_dimension_keeps_ratio(self, normalizer, png_bytes):
        result = normalizer.reencode(png_bytes, "png", resize=ResizeOptions(width=32))
        assert open_image(result).size == (32, 24)

    def test_undecodable_input(self, normalizer):
        with pytest.raises(UnsupportedInputError) as exc_info:
            normalizer.reencode(b"definitely not an image", "webp")

        assert exc_info.value.code == "UNSUPPORTED_INPUT"

    def test_unknown_target_format(self, normalizer, png_bytes):
        with pytest.raises(ValueError):
            normalizer.reencode(png_bytes, "bmp")


@pytest.mark.unit
@pytest.mark.images
class TestPrepareForProvider:
    """参考图格式兼容测试类"""

    def test_jpeg_passes_through(self, normalizer, jpeg_bytes):
        """兼容的JPEG原样返回"""
        result = normalizer.prepare_for_provider(jpeg_bytes, "image/jpeg", "photo.jpg")

        assert result.data == jpeg_bytes
        assert result.converted is False
        assert result.extension == "jpg"
        assert result.mime_type == "image/jpeg"
        assert normalizer.conversion_count == 0

    def test_jpeg_extension_preserved(self, normalizer, jpeg_bytes):
        result = normalizer.prepare_for_provider(jpeg_bytes, None, "photo.jpeg")
        assert result.extension == "jpeg"
        assert result.converted is False

    def test_webp_converted_to_png(self, normalizer):
        data = make_image_bytes(40, 30, "WEBP")

        result = normalizer.prepare_for_provider(data, "image/webp", "photo.webp")

        assert result.converted is True
        assert result.extension == "png"
        assert result.mime_type == "image/png"
        assert result.original_size == len(data)
        assert open_image(result.data).format == "PNG"
        assert normalizer.conversion_count == 1

    def test_png_converted(self, normalizer, png_bytes):
        """PNG不在白名单内，同样转换"""
        result = normalizer.prepare_for_provider(png_bytes, "image/png", "photo.png")
        assert result.converted is True

    def test_conversion_count_under_concurrent_calls(self, normalizer):
        """线程池并发转换时计数不丢失"""
        data = make_image_bytes(32, 32, "WEBP")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(
                lambda _: normalizer.prepare_for_provider(data, "image/webp", "photo.webp"),
                range(40)
            ))

        assert all(r.converted for r in results)
        assert normalizer.conversion_count == 40

    def test_mislabelled_jpeg_converted(self, normalizer, png_bytes):
        """声明为JPEG但实际是PNG时按实际格式处理"""
        result = normalizer.prepare_for_provider(png_bytes, "image/jpeg", "photo.jpg")

        assert result.converted is True
        assert result.extension == "png"

    def test_undecodable_input(self, normalizer):
        with pytest.raises(UnsupportedInputError):
            normalizer.prepare_for_provider(b"\x00\x01", "image/heic", "photo.heic")


@pytest.mark.unit
@pytest.mark.images
class TestReadInfo:
    """元信息读取测试类"""

    def test_read_info(self, normalizer, png_bytes):
        info = normalizer.read_info(png_bytes)

        assert (info.width, info.height) == (64, 48)
        assert info.format == "png"
        assert info.size == len(png_bytes)

    def test_read_info_invalid(self, normalizer):
        with pytest.raises(UnsupportedInputError):
            normalizer.read_info(b"nope")


@pytest.mark.unit
@pytest.mark.images
def test_declared_extension():
    """MIME优先，其次文件名"""
    assert declared_extension("image/pjpeg", "a.png") == "jpg"
    assert declared_extension("application/octet-stream", "a.HEIC") == "heic"
    assert declared_extension(None, "noext") is None

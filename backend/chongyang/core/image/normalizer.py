"""
图片规范化模块
把任意来源的图片数据转换为可上传、可提交给生成服务的数据
"""

import io
import re
import threading
from typing import Dict, Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from chongyang.core.image.exceptions import UnsupportedInputError
from chongyang.core.image.models import ImageInfo, NormalizedImage, ResizeFit, ResizeOptions
from chongyang.core.log_utils import get_logger

logger = get_logger(__name__)

# Pillow 解码失败时可能抛出的异常
DECODE_ERRORS = (UnidentifiedImageError, OSError, Image.DecompressionBombError, SyntaxError)

# 目标格式 -> (Pillow格式名, MIME类型, 扩展名)
FORMAT_SPECS: Dict[str, Tuple[str, str, str]] = {
    "webp": ("WEBP", "image/webp", "webp"),
    "jpeg": ("JPEG", "image/jpeg", "jpg"),
    "jpg": ("JPEG", "image/jpeg", "jpg"),
    "png": ("PNG", "image/png", "png"),
}

# 存储使用的压缩格式
STORAGE_FORMAT = "webp"

# 生成服务接受的参考图格式（同一种有损格式的两种写法）
PROVIDER_SUPPORTED_EXTENSIONS = ("jpg", "jpeg")
# 不兼容时转换成的无损格式
PROVIDER_FALLBACK_FORMAT = "png"

ACCEPTED_MIME_TYPES: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
}

_SIZE_PATTERN = re.compile(r"^([0-9]+)x([0-9]+)$", re.IGNORECASE)


def parse_size_directive(size: Optional[str]) -> Optional[ResizeOptions]:
    """
    从 "宽x高" 字符串推导缩放指令

    解析失败（格式不符、非正整数）时静默返回 None，表示不缩放。

    Args:
        size: 尺寸字符串，如 "1440x2560"

    Returns:
        Optional[ResizeOptions]: 居中裁剪填满的缩放指令
    """
    if not isinstance(size, str):
        return None

    match = _SIZE_PATTERN.match(size.strip())
    if not match:
        return None

    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        return None

    return ResizeOptions(width=width, height=height, fit=ResizeFit.COVER)


def extension_from_name(file_name: Optional[str]) -> Optional[str]:
    """取文件名的小写扩展名，没有扩展名时返回 None"""
    if not file_name or "." not in file_name:
        return None
    extension = file_name.rsplit(".", 1)[-1].strip().lower()
    return extension or None


def declared_extension(declared_mime: Optional[str], file_name: Optional[str] = None) -> Optional[str]:
    """根据声明的MIME类型或文件名推断扩展名"""
    if declared_mime:
        extension = ACCEPTED_MIME_TYPES.get(declared_mime.split(";")[0].strip().lower())
        if extension:
            return extension
    return extension_from_name(file_name)


class ImageNormalizer:
    """
    图片规范化器

    - reencode: 重编码为目标格式，可选缩放
    - prepare_for_provider: 按生成服务的格式白名单检查，不兼容时转为PNG
    - read_info: 只解析文件头获取尺寸和格式

    所有方法都是同步的CPU密集操作，异步调用方应放到线程池中执行。
    """

    def __init__(self) -> None:
        # 格式转换次数，转换会明显改变数据大小；线程池中并发调用时需加锁
        self.conversion_count = 0
        self._count_lock = threading.Lock()

    @staticmethod
    def _open(data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except DECODE_ERRORS as e:
            raise UnsupportedInputError(
                "无法解码图像数据: {}".format(str(e)),
                details={'size': len(data)}
            ) from e
        return image

    @staticmethod
    def _resolve_format(target_format: str) -> Tuple[str, str, str]:
        spec = FORMAT_SPECS.get(target_format.lower())
        if not spec:
            raise ValueError("不支持的目标格式: {}".format(target_format))
        return spec

    @staticmethod
    def _prepare_mode(image: Image.Image, pil_format: str) -> Image.Image:
        """转换成目标编码器支持的色彩模式"""
        has_alpha = image.mode in ("RGBA", "LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        )

        if pil_format == "JPEG":
            return image if image.mode == "RGB" else image.convert("RGB")
        if pil_format == "WEBP":
            target_mode = "RGBA" if has_alpha else "RGB"
            return image if image.mode == target_mode else image.convert(target_mode)
        if image.mode == "CMYK":
            return image.convert("RGB")
        return image

    @staticmethod
    def _apply_resize(image: Image.Image, resize: ResizeOptions) -> Image.Image:
        width, height = resize.width, resize.height
        resample = Image.Resampling.LANCZOS

        if not width and not height:
            return image

        if not width or not height:
            # 只给出一边时保持宽高比
            orig_width, orig_height = image.size
            if width:
                height = max(1, round(orig_height * width / orig_width))
            else:
                width = max(1, round(orig_width * height / orig_height))
            return image.resize((width, height), resample)

        fit = ResizeFit(resize.fit)
        if fit == ResizeFit.COVER:
            return ImageOps.fit(image, (width, height), method=resample, centering=(0.5, 0.5))
        if fit == ResizeFit.CONTAIN:
            return ImageOps.pad(image, (width, height), method=resample, centering=(0.5, 0.5))
        if fit == ResizeFit.INSIDE:
            return ImageOps.contain(image, (width, height), method=resample)
        return image.resize((width, height), resample)

    @staticmethod
    def _save_options(pil_format: str, quality: int) -> Dict[str, object]:
        if pil_format == "WEBP":
            # method=6 压缩最慢、体积最小
            return {"quality": quality, "method": 6}
        if pil_format == "JPEG":
            return {"quality": quality, "optimize": True, "progressive": True}
        return {"optimize": True, "compress_level": 6}

    def reencode(
        self,
        data: bytes,
        target_format: str = STORAGE_FORMAT,
        quality: int = 80,
        resize: Optional[ResizeOptions] = None
    ) -> bytes:
        """
        重编码图片

        Args:
            data: 源图片数据
            target_format: 目标格式（webp/jpeg/png）
            quality: 有损格式的质量（1-100）
            resize: 可选的缩放指令

        Returns:
            bytes: 目标格式的图片数据

        Raises:
            UnsupportedInputError: 源数据无法解码
        """
        pil_format, _, _ = self._resolve_format(target_format)
        quality = max(1, min(100, int(quality)))

        image = self._open(data)
        try:
            processed = self._prepare_mode(image, pil_format)
            if resize:
                processed = self._apply_resize(processed, resize)

            output = io.BytesIO()
            processed.save(output, format=pil_format, **self._save_options(pil_format, quality))
            return output.getvalue()
        finally:
            image.close()

    def sniff_format(self, data: bytes) -> str:
        """
        识别图片实际格式

        Returns:
            str: Pillow格式名，如 "JPEG"、"PNG"

        Raises:
            UnsupportedInputError: 无法识别
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
        except DECODE_ERRORS as e:
            raise UnsupportedInputError("无法识别的图像格式: {}".format(str(e))) from e

        if not image_format:
            raise UnsupportedInputError("无法识别的图像格式")
        return image_format

    def is_provider_compatible(self, sniffed_format: str, declared_ext: Optional[str]) -> bool:
        """声明格式与实际格式都在白名单内才算兼容"""
        if sniffed_format != "JPEG":
            return False
        return declared_ext is None or declared_ext in PROVIDER_SUPPORTED_EXTENSIONS

    def prepare_for_provider(
        self,
        data: bytes,
        declared_mime: Optional[str] = None,
        file_name: Optional[str] = None
    ) -> NormalizedImage:
        """
        按生成服务的格式白名单规范化参考图

        Args:
            data: 图片数据
            declared_mime: 上传时声明的MIME类型
            file_name: 上传时的文件名

        Returns:
            NormalizedImage: 兼容时原样返回，否则转换为PNG

        Raises:
            UnsupportedInputError: 数据无法解码
        """
        declared_ext = declared_extension(declared_mime, file_name)
        sniffed = self.sniff_format(data)

        if self.is_provider_compatible(sniffed, declared_ext):
            extension = declared_ext or "jpg"
            return NormalizedImage(
                data=data,
                extension=extension,
                mime_type="image/jpeg",
                converted=False,
                original_size=len(data)
            )

        converted = self.reencode(data, PROVIDER_FALLBACK_FORMAT, quality=95)
        with self._count_lock:
            self.conversion_count += 1
            count = self.conversion_count
        _, mime_type, extension = self._resolve_format(PROVIDER_FALLBACK_FORMAT)

        logger.info(
            "转换图片格式 {source} -> {target}",
            source=declared_ext or sniffed.lower(),
            target=extension,
            extra={
                'original_size': len(data),
                'converted_size': len(converted),
                'conversion_count': count
            }
        )

        return NormalizedImage(
            data=converted,
            extension=extension,
            mime_type=mime_type,
            converted=True,
            original_size=len(data)
        )

    def read_info(self, data: bytes) -> ImageInfo:
        """
        只解析文件头读取元信息

        Raises:
            UnsupportedInputError: 数据无法识别
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                image_format = image.format
        except DECODE_ERRORS as e:
            raise UnsupportedInputError("无法读取图像信息: {}".format(str(e))) from e

        return ImageInfo(
            width=width,
            height=height,
            format=image_format.lower() if image_format else None,
            size=len(data)
        )


__all__ = [
    'ImageNormalizer',
    'parse_size_directive',
    'declared_extension',
    'extension_from_name',
    'ACCEPTED_MIME_TYPES',
    'PROVIDER_SUPPORTED_EXTENSIONS',
    'STORAGE_FORMAT',
    'FORMAT_SPECS',
]

"""
图片获取与上传管线
下载远程图片、压缩为WebP、上传到对象存储并签发限时访问URL
"""

import asyncio
import inspect
from functools import partial
from typing import List, Optional

import httpx

from chongyang.core.config import settings
from chongyang.core.image import (
    EmptyPayloadError,
    FetchError,
    ImageInfo,
    ImageNormalizer,
    ImageProcessingError,
    ResizeFit,
    ResizeOptions,
)
from chongyang.core.image.normalizer import FORMAT_SPECS, STORAGE_FORMAT
from chongyang.core.log_messages import log_messages
from chongyang.core.log_utils import get_logger
from chongyang.core.storage import BaseStorage, StorageError
from chongyang.services.image.models import (
    ImageProcessResult,
    ProgressCallback,
    UploadBatchProgress,
    compute_compression_ratio,
)
from chongyang.utils.id_utils import current_millis, generate_timestamped_name

logger = get_logger(__name__)

DEFAULT_PROJECT = "default"


class ImageUploadPipeline:
    """
    图片获取与上传管线

    存储服务和HTTP客户端通过构造函数注入；未注入HTTP客户端时每次下载
    临时创建一个。
    """

    def __init__(
        self,
        storage: BaseStorage,
        normalizer: Optional[ImageNormalizer] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.storage = storage
        self.normalizer = normalizer or ImageNormalizer()
        self._http_client = http_client

        _, self.content_type, self.extension = FORMAT_SPECS[STORAGE_FORMAT]

    # ==================== 下载 ====================

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        headers = {'User-Agent': settings.image_fetch_user_agent}
        return await client.get(url, headers=headers)

    async def fetch(self, url: str) -> bytes:
        """
        下载图片，带浏览器 User-Agent（部分服务拒绝默认UA）

        Raises:
            FetchError: 非2xx响应、网络错误或URL不合法
            EmptyPayloadError: 响应体为空
        """
        try:
            if self._http_client is not None:
                response = await self._get(self._http_client, url)
            else:
                timeout = httpx.Timeout(settings.image_fetch_timeout)
                async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                    response = await self._get(client, url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError("下载失败: {}".format(str(e)), details={'url': url}) from e

        if response.is_error:
            raise FetchError(
                "下载失败: {} {}".format(response.status_code, response.reason_phrase),
                status_code=response.status_code,
                details={'url': url}
            )

        data = response.content
        if not data:
            raise EmptyPayloadError(details={'url': url})
        return data

    # ==================== 编码与存储 ====================

    async def _reencode(self, data: bytes, quality: int, resize: Optional[ResizeOptions]) -> bytes:
        """重编码是CPU密集操作，放到线程池避免阻塞事件循环"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            partial(self.normalizer.reencode, data, STORAGE_FORMAT, quality, resize)
        )

    async def _store(self, key: str, data: bytes) -> str:
        """上传并签发访问URL"""
        await self.storage.put(
            key,
            data,
            content_type=self.content_type,
            cache_control=settings.image_cache_control
        )
        return await self.storage.signed_url(key, settings.image_signed_url_days)

    def build_storage_key(self, project_id: Optional[str], file_name: Optional[str] = None) -> str:
        """generated-images/{项目}/{文件名或时间戳-随机串}.webp"""
        if file_name:
            name = file_name if "." in file_name else f"{file_name}.{self.extension}"
        else:
            name = generate_timestamped_name(self.extension)
        return f"{settings.image_storage_prefix}/{project_id or DEFAULT_PROJECT}/{name}"

    # ==================== 单张处理 ====================

    async def process_one(
        self,
        source_url: str,
        project_id: Optional[str] = None,
        file_name: Optional[str] = None,
        quality: int = 80,
        resize: Optional[ResizeOptions] = None
    ) -> ImageProcessResult:
        """
        处理单张图像：下载、压缩为WebP、上传、签名

        处理失败不会抛出异常，而是返回 success=False 的结果。

        Args:
            source_url: 原始图像URL
            project_id: 项目ID，决定存储目录
            file_name: 文件名（可选，默认自动生成）
            quality: 图像质量 (1-100)
            resize: 可选的缩放指令

        Returns:
            ImageProcessResult: 处理结果
        """
        logger.info(log_messages.IMAGE_PROCESS_START, source_url=source_url[:100])

        try:
            original = await self.fetch(source_url)
            original_size = len(original)
            logger.info(log_messages.IMAGE_DOWNLOADED, size_kb=f"{original_size / 1024:.2f}")

            compressed = await self._reencode(original, quality, resize)
            compressed_size = len(compressed)
            ratio = compute_compression_ratio(original_size, compressed_size)
            logger.info(
                log_messages.IMAGE_COMPRESSED,
                original_kb=f"{original_size / 1024:.2f}",
                compressed_kb=f"{compressed_size / 1024:.2f}",
                ratio=f"{ratio:.1f}"
            )

            key = self.build_storage_key(project_id, file_name)
            signed_url = await self._store(key, compressed)
        except (ImageProcessingError, StorageError) as e:
            logger.error(log_messages.IMAGE_PROCESS_FAILED, error=str(e), extra={'source_url': source_url})
            return ImageProcessResult.failure(source_url, e.message, e.code)

        logger.info("图像处理完成", extra={'key': key})

        return ImageProcessResult(
            success=True,
            url=signed_url,
            storage_key=key,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=ratio,
            source_url=source_url
        )

    # ==================== 批量处理 ====================

    def _settle(self, url: str, outcome) -> ImageProcessResult:
        """把意外异常也转换成失败结果，保证每个条目都有结论"""
        if isinstance(outcome, ImageProcessResult):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        logger.error("图像处理出现未预期异常", exception=outcome, extra={'source_url': url})
        return ImageProcessResult.failure(url, "未知错误: {}".format(str(outcome)), "UNEXPECTED_ERROR")

    async def process_batch(
        self,
        urls: List[str],
        project_id: Optional[str] = None,
        quality: int = 80,
        concurrency: int = 3,
        resize: Optional[ResizeOptions] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[ImageProcessResult]:
        """
        分批处理图像

        每批 concurrency 张并发执行，批与批之间严格串行；结果顺序与输入一致，
        单张失败不会中断整个批处理。

        Args:
            urls: 图像URL列表
            project_id: 项目ID
            quality: 图像质量 (1-100)
            concurrency: 每批并发数
            resize: 可选的缩放指令
            on_progress: 每批完成后回调 (已完成数, 总数, 本批最后一个结果)

        Returns:
            List[ImageProcessResult]: 处理结果列表
        """
        concurrency = max(1, int(concurrency))
        total = len(urls)
        results: List[ImageProcessResult] = []
        batch_stamp = current_millis()

        logger.info(log_messages.BATCH_START, total=total, concurrency=concurrency)

        for start in range(0, total, concurrency):
            chunk = urls[start:start + concurrency]
            outcomes = await asyncio.gather(
                *(
                    self.process_one(
                        url,
                        project_id,
                        f"batch-{start + index + 1}-{batch_stamp}.{self.extension}",
                        quality,
                        resize
                    )
                    for index, url in enumerate(chunk)
                ),
                return_exceptions=True
            )
            chunk_results = [self._settle(url, outcome) for url, outcome in zip(chunk, outcomes)]
            results.extend(chunk_results)

            logger.info(
                log_messages.BATCH_CHUNK_DONE,
                chunk=start // concurrency + 1,
                succeeded=sum(1 for r in chunk_results if r.success),
                size=len(chunk)
            )

            if on_progress:
                progress = UploadBatchProgress(
                    completed=len(results),
                    total=total,
                    last_result=chunk_results[-1]
                )
                maybe_awaitable = on_progress(progress.completed, progress.total, progress.last_result)
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable

        succeeded = sum(1 for r in results if r.success)
        logger.info(log_messages.BATCH_DONE, succeeded=succeeded, total=total, failed=total - succeeded)

        return results

    # ==================== 缩略图与元信息 ====================

    async def thumbnail(
        self,
        source_url: str,
        width: int = 300,
        height: int = 300,
        project_id: Optional[str] = None
    ) -> ImageProcessResult:
        """
        生成缩略图，固定居中裁剪填满、质量85，存放在独立的缩略图目录

        Args:
            source_url: 原始图像URL
            width: 缩略图宽度
            height: 缩略图高度
            project_id: 项目ID

        Returns:
            ImageProcessResult: 处理结果
        """
        logger.info("生成缩略图: {width}x{height}", width=width, height=height)
        resize = ResizeOptions(width=width, height=height, fit=ResizeFit.COVER)

        try:
            original = await self.fetch(source_url)
            thumbnail = await self._reencode(original, settings.image_thumbnail_quality, resize)

            name = generate_timestamped_name(self.extension, suffix=f"{width}x{height}")
            key = f"{settings.image_thumbnail_prefix}/{project_id or DEFAULT_PROJECT}/{name}"
            signed_url = await self._store(key, thumbnail)
        except (ImageProcessingError, StorageError) as e:
            logger.error("缩略图生成失败", extra={'source_url': source_url, 'error': str(e)})
            return ImageProcessResult.failure(source_url, e.message, e.code)

        return ImageProcessResult(
            success=True,
            url=signed_url,
            storage_key=key,
            original_size=len(original),
            compressed_size=len(thumbnail),
            compression_ratio=compute_compression_ratio(len(original), len(thumbnail)),
            source_url=source_url
        )

    async def image_metadata(self, stored_url: str) -> Optional[ImageInfo]:
        """
        读取已存储图片的尺寸、格式和大小

        这是尽力而为的查询，下载或解析失败时返回 None。
        """
        try:
            data = await self.fetch(stored_url)
            return self.normalizer.read_info(data)
        except ImageProcessingError as e:
            logger.warning("获取图像信息失败", extra={'url': stored_url[:100], 'error': str(e)})
            return None

"""
日志消息模板模块
统一管理所有业务日志消息模板，便于维护和国际化
"""

from typing import Any, Dict


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 图片处理管线 ====================
    IMAGE_PROCESS_START = "开始处理图像: {source_url}"
    IMAGE_DOWNLOADED = "图像下载完成，原始大小: {size_kb} KB"
    IMAGE_COMPRESSED = "图像压缩完成: {original_kb} KB -> {compressed_kb} KB ({ratio}%)"
    IMAGE_PROCESS_FAILED = "图像处理失败: {error}"
    BATCH_START = "开始批量处理 {total} 张图像，并发数: {concurrency}"
    BATCH_CHUNK_DONE = "批次 {chunk} 完成: {succeeded}/{size} 成功"
    BATCH_DONE = "批量图像处理完成: 成功 {succeeded}/{total}，失败 {failed}"

    # ==================== 图片生成 ====================
    GENERATION_START = "开始调用图片生成API"
    GENERATION_UNDERFILLED = "需要生成 {requested} 张图片，但API只返回了 {received} 张，进行额外调用"
    GENERATION_SUPPLEMENTAL_FAILED = "第 {attempt} 次补充调用失败"
    GENERATION_DONE = "图像生成和上传完成"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()

"""
日志系统单元测试
遵循项目测试规范：快速执行，无外部依赖
"""

import logging

import pytest
from unittest.mock import patch

from chongyang.core.log_messages import LogMessages
from chongyang.core.log_utils import UnifiedLogger, get_logger


@pytest.mark.unit
@pytest.mark.logging
class TestUnifiedLogger:
    """UnifiedLogger 单元测试类"""

    def setup_method(self):
        self.logger_name = "test_logger"
        self.unified_logger = UnifiedLogger(self.logger_name)

    def test_init(self):
        assert self.unified_logger.name == self.logger_name
        assert isinstance(self.unified_logger.logger, logging.Logger)

    def test_info_with_simple_message(self):
        """无格式化参数时消息原样输出"""
        with patch.object(self.unified_logger.logger, 'info') as mock_info:
            self.unified_logger.info("简单的日志消息 {not_a_field}")

            call_args = mock_info.call_args
            assert call_args[0][0] == "简单的日志消息 {not_a_field}"
            assert call_args[1]['extra']['log_module'] == self.logger_name

    def test_info_with_format_parameters(self):
        with patch.object(self.unified_logger.logger, 'info') as mock_info:
            self.unified_logger.info(LogMessages.BATCH_START, total=5, concurrency=3)

            call_args = mock_info.call_args
            assert call_args[0][0] == "开始批量处理 5 张图像，并发数: 3"
            assert call_args[1]['extra']['total'] == 5

    def test_extra_is_flattened(self):
        """extra 字典展开为结构化字段，且不会触发格式化"""
        with patch.object(self.unified_logger.logger, 'info') as mock_info:
            self.unified_logger.info("上传成功 {key}", extra={'key': "a.webp", 'size': 10})

            call_args = mock_info.call_args
            assert call_args[0][0] == "上传成功 {key}"
            assert call_args[1]['extra']['key'] == "a.webp"
            assert call_args[1]['extra']['size'] == 10

    def test_reserved_fields_are_prefixed(self):
        """与 LogRecord 属性重名的字段加前缀，避免 logging 抛出 KeyError"""
        with patch.object(self.unified_logger.logger, 'info') as mock_info:
            self.unified_logger.info("处理文件", extra={'filename': "a.png", 'module': "x"})

            extra = mock_info.call_args[1]['extra']
            assert extra['field_filename'] == "a.png"
            assert extra['field_module'] == "x"
            assert 'filename' not in extra

    def test_reserved_fields_accepted_by_logging(self, caplog):
        logger = UnifiedLogger("test_logger_reserved")
        with caplog.at_level(logging.INFO, logger="test_logger_reserved"):
            logger.info("处理文件", extra={'filename': "a.png"})

        assert caplog.records[-1].field_filename == "a.png"

    def test_missing_template_field_keeps_template(self):
        with patch.object(self.unified_logger.logger, 'warning') as mock_warning:
            self.unified_logger.warning(LogMessages.BATCH_START, total=1)

            assert mock_warning.call_args[0][0] == LogMessages.BATCH_START

    def test_error_with_exception(self):
        with patch.object(self.unified_logger.logger, 'error') as mock_error:
            error = ValueError("bad value")
            self.unified_logger.error("操作失败", exception=error)

            call_args = mock_error.call_args
            assert call_args[1]['exc_info'] is error
            assert call_args[1]['extra']['exception_type'] == "ValueError"
            assert call_args[1]['extra']['exception_message'] == "bad value"

    def test_debug_only_in_debug_mode(self):
        with patch('chongyang.core.log_utils.settings') as mock_settings, \
                patch.object(self.unified_logger.logger, 'debug') as mock_debug:
            mock_settings.app_debug = False
            self.unified_logger.debug("调试信息")
            mock_debug.assert_not_called()

            mock_settings.app_debug = True
            self.unified_logger.debug("调试信息")
            mock_debug.assert_called_once()


@pytest.mark.unit
@pytest.mark.logging
def test_get_logger_is_cached():
    assert get_logger("chongyang.test") is get_logger("chongyang.test")

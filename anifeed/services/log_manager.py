import logging
import logging.handlers
import re
from pathlib import Path
from typing import Optional

from anifeed.core.config import settings


# 一个过滤器，用于隐藏日志中的敏感信息（元数据源的 Token 等）
class SensitiveInfoFilter(logging.Filter):
    """过滤器，用于隐藏日志中的敏感信息"""

    # 敏感信息的正则表达式模式
    PATTERNS = [
        (re.compile(r'(access_token=)([a-zA-Z0-9_-]{20,})'), r'\1****'),  # Bangumi OAuth token
        (re.compile(r'(token=)([a-zA-Z0-9_-]{20,})'), r'\1****'),  # 其他 Token
        (re.compile(r'(Authorization:\s*Bearer\s+)([a-zA-Z0-9_-]{20,})'), r'\1****'),  # Bearer token
        (re.compile(r'(Bearer\s+)([a-zA-Z0-9_.-]{20,})'), r'\1****'),
    ]

    def filter(self, record):
        # 获取日志消息
        msg = record.getMessage()

        # 应用所有替换模式
        for pattern, replacement in self.PATTERNS:
            msg = pattern.sub(replacement, msg)

        # 更新日志消息
        record.msg = msg
        record.args = ()  # 清空args，因为我们已经格式化了消息

        return True


def setup_logging(log_dir: Optional[Path] = None):
    """
    配置根日志记录器，输出到控制台，并按配置输出到一个可轮转的文件。
    此函数应在应用启动时被调用一次。
    """
    # 为控制台和文件日志定义详细的格式
    verbose_formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s:%(lineno)d] [%(levelname)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 从配置中获取日志级别，如果无效则默认为 INFO
    log_level = getattr(logging, settings.log.level.upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # 清理已存在的处理器，以避免在热重载时重复添加
    if logger.hasHandlers():
        logger.handlers.clear()

    sensitive_filter = SensitiveInfoFilter()
    logger.addHandler(logging.StreamHandler())  # 控制台处理器

    if settings.log.to_file or log_dir is not None:
        log_dir = Path(log_dir or settings.log.dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError) as e:
            # 如果无法创建日志目录，使用当前目录
            logger.warning(f"无法创建日志目录 {log_dir}: {e}，将使用当前目录")
            log_dir = Path(".")
        log_file = log_dir / "anifeed.log"
        logger.addHandler(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'
        ))  # 文件处理器

    # 为所有处理器设置格式和过滤器
    for handler in logger.handlers:
        handler.setFormatter(verbose_formatter)
        handler.addFilter(sensitive_filter)

    logging.getLogger(__name__).info(f"日志系统已初始化，级别: {logging.getLevelName(log_level)}")

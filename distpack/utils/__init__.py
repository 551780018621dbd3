"""通用工具模块"""

from .logging import (
    LogStage,
    OutputLevel,
    set_log_level,
    set_log_file,
)

from .paths import (
    ensure_directory,
    remove_tree,
    remove_file,
    move_file,
    format_size,
    is_safe_filename,
)

__all__ = [
    # 日志相关
    "LogStage",
    "OutputLevel",
    "set_log_level",
    "set_log_file",

    # 路径相关
    "ensure_directory",
    "remove_tree",
    "remove_file",
    "move_file",
    "format_size",
    "is_safe_filename",
]

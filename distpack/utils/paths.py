"""
路径工具

提供目录创建、删除、移动等文件系统工具函数。
"""

import shutil
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在（幂等）

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def remove_tree(path: Union[str, Path]) -> bool:
    """递归删除目录，目录不存在时什么也不做

    Returns:
        bool: 是否确实删除了目录
    """
    dir_path = Path(path)
    if not dir_path.exists():
        return False
    if dir_path.is_dir() and not dir_path.is_symlink():
        shutil.rmtree(dir_path)
    else:
        dir_path.unlink()
    return True


def remove_file(path: Union[str, Path]) -> bool:
    """删除文件，文件不存在时什么也不做"""
    file_path = Path(path)
    if not file_path.exists():
        return False
    file_path.unlink()
    return True


def move_file(source: Union[str, Path], destination: Union[str, Path]) -> Path:
    """移动文件，目标已存在时覆盖

    Returns:
        Path: 目标路径
    """
    source = Path(source)
    destination = Path(destination)
    if destination.exists():
        destination.unlink()
    shutil.move(str(source), str(destination))
    return destination


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"


def is_safe_filename(filename: str) -> bool:
    """检查文件名是否可以作为单个路径组件使用

    Args:
        filename: 文件名

    Returns:
        bool: 是否安全
    """
    if not filename or filename in (".", ".."):
        return False

    # 路径分隔符以及 Windows 非法字符
    illegal_chars = '<>:"/\\|?*'
    if any(char in filename for char in illegal_chars):
        return False

    if len(filename) > 255:
        return False

    return True

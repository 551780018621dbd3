"""
清单读取

从项目清单（默认 Cargo.toml）中按行读取 ``key = "value"`` 字段。
只取第一处匹配，不做语义化版本校验。
"""

import re
from pathlib import Path
from typing import Union

from ..utils.logging import debug, LogStage
from .build_context import FilesystemError, ManifestFieldNotFound, VersionNotFound


class ManifestReader:
    """逐行扫描的清单读取器

    键必须位于行首且大小写敏感，因此 ``# version = "0.0.0"``
    这样的注释行以及 ``[dependencies]`` 表里的内联 version 都不会命中。
    """

    def __init__(self, manifest_path: Union[str, Path]):
        self.manifest_path = Path(manifest_path)

    def _read_lines(self) -> list:
        try:
            return self.manifest_path.read_text(encoding='utf-8').splitlines()
        except FileNotFoundError as e:
            raise FilesystemError(f"清单文件不存在: {self.manifest_path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(f"读取清单文件失败 {self.manifest_path}: {e}") from e

    def read_field(self, key: str, error_cls: type = ManifestFieldNotFound) -> str:
        """读取第一处 ``key = "value"`` 的值

        第一处出现该键的行即为结果；该行若不是带引号的非空值，
        直接失败而不会继续向后查找。

        Raises:
            ManifestFieldNotFound: 找不到字段或值无法解析（可通过 error_cls 指定子类）
        """
        key_pattern = re.compile(rf'^{re.escape(key)}\s*=')
        value_pattern = re.compile(rf'^{re.escape(key)}\s*=\s*"([^"]*)"')

        for line_num, line in enumerate(self._read_lines(), start=1):
            if not key_pattern.match(line):
                continue

            match = value_pattern.match(line)
            if not match:
                raise error_cls(
                    f"{self.manifest_path}:{line_num} 的 {key} 不是带引号的字符串: {line.strip()!r}"
                )
            value = match.group(1).strip()
            if not value:
                raise error_cls(f"{self.manifest_path}:{line_num} 的 {key} 为空")

            debug(f"清单字段 {key}={value} (第 {line_num} 行)", stage=LogStage.INIT)
            return value

        raise error_cls(f"清单 {self.manifest_path} 中没有 {key} = \"...\" 行")

    def read_version(self) -> str:
        """读取版本号"""
        return self.read_field("version", VersionNotFound)

    def read_name(self) -> str:
        """读取包名（crate 名称）"""
        return self.read_field("name")


def resolve_version(manifest_path: Union[str, Path]) -> str:
    """便捷函数：从清单解析版本号

    Raises:
        VersionNotFound: 没有匹配的版本行
    """
    return ManifestReader(manifest_path).read_version()

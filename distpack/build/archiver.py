"""
归档器抽象接口和实现

把暂存目录打包成单个归档文件，归档内只有一个顶层目录。
zip 格式优先调用系统 zip 工具，找不到时回退到内置 zipfile；
tar.gz 格式使用内置 tarfile。
"""

import os
import shutil
import subprocess
import tarfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterator, Optional

from ..config.schema import ArchiveFormat
from ..utils.logging import debug, warning, LogStage
from .targets import HostFamily, detect_host_family


class ArchiveError(Exception):
    """归档相关错误"""
    pass


class Archiver(ABC):
    """归档器抽象基类"""

    extension: str = ""

    def archive_path_for(self, staging_dir: Path) -> Path:
        """归档文件路径: 与暂存目录同级的 {name}.{ext}"""
        return staging_dir.parent / f"{staging_dir.name}.{self.extension}"

    def create(self, staging_dir: Path) -> Path:
        """把暂存目录打包为归档

        Args:
            staging_dir: 已填充的暂存目录

        Returns:
            Path: 归档文件路径

        Raises:
            ArchiveError: 归档失败或没有产生输出文件
        """
        if not staging_dir.is_dir():
            raise ArchiveError(f"暂存目录不存在: {staging_dir}")

        archive_path = self.archive_path_for(staging_dir)
        if archive_path.exists():
            archive_path.unlink()

        try:
            self._write(staging_dir, archive_path)
        except ArchiveError:
            raise
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"{self.get_format().value} 归档失败: {e}") from e

        if not archive_path.is_file():
            raise ArchiveError(f"归档完成但未找到输出文件: {archive_path}")

        return archive_path

    @abstractmethod
    def _write(self, staging_dir: Path, archive_path: Path) -> None:
        """写入归档文件"""
        pass

    @abstractmethod
    def get_format(self) -> ArchiveFormat:
        """获取归档格式"""
        pass


def _walk_entries(staging_dir: Path) -> Iterator[Path]:
    """按稳定顺序遍历暂存目录（包含目录本身）"""
    yield staging_dir
    for root, dirs, files in os.walk(staging_dir):
        dirs.sort()
        root_path = Path(root)
        for name in dirs:
            yield root_path / name
        for name in sorted(files):
            yield root_path / name


class ZipArchiver(Archiver):
    """Zip 归档器"""

    extension = "zip"

    def __init__(self, use_utility: bool = True, level: int = 6,
                 runner: Callable = subprocess.run):
        self.use_utility = use_utility
        self.level = min(9, max(1, level))
        self._runner = runner

    def get_format(self) -> ArchiveFormat:
        return ArchiveFormat.ZIP

    def utility_path(self) -> Optional[str]:
        """系统 zip 工具路径"""
        if not self.use_utility:
            return None
        return shutil.which("zip")

    def _write(self, staging_dir: Path, archive_path: Path) -> None:
        utility = self.utility_path()
        if utility:
            self._write_with_utility(utility, staging_dir, archive_path)
        else:
            debug("未使用 zip 工具，改用内置 zipfile", stage=LogStage.ARCHIVE)
            self._write_with_zipfile(staging_dir, archive_path)

    def _write_with_utility(self, utility: str, staging_dir: Path, archive_path: Path) -> None:
        """zip -rq <archive> <dir>，在暂存目录的父目录中执行"""
        cmd = [utility, "-rq", f"-{self.level}", archive_path.name, staging_dir.name]
        debug(f"执行: {' '.join(cmd)}", stage=LogStage.ARCHIVE)
        try:
            result = self._runner(
                cmd,
                cwd=str(staging_dir.parent),
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ArchiveError(f"无法执行 zip 工具: {e}") from e

        if result.returncode != 0:
            raise ArchiveError(f"zip 工具返回 {result.returncode}: {result.stderr.strip()}")

    def _write_with_zipfile(self, staging_dir: Path, archive_path: Path) -> None:
        base = staging_dir.parent
        with zipfile.ZipFile(archive_path, 'w', zipfile.ZIP_DEFLATED, compresslevel=self.level) as zf:
            for entry in _walk_entries(staging_dir):
                arcname = entry.relative_to(base).as_posix()
                if entry.is_dir():
                    # ZipFile.write 会为目录生成以 / 结尾的条目
                    zf.write(entry, arcname)
                else:
                    try:
                        zf.write(entry, arcname)
                    except OSError as e:
                        raise ArchiveError(f"添加文件到 Zip 失败 {entry}: {e}") from e


class TarGzArchiver(Archiver):
    """tar.gz 归档器"""

    extension = "tar.gz"

    def __init__(self, level: int = 9):
        self.level = min(9, max(1, level))

    def get_format(self) -> ArchiveFormat:
        return ArchiveFormat.TAR_GZ

    def _write(self, staging_dir: Path, archive_path: Path) -> None:
        with tarfile.open(archive_path, "w:gz", compresslevel=self.level) as tf:
            tf.add(str(staging_dir), arcname=staging_dir.name, recursive=True)


class ArchiverFactory:
    """归档器工厂

    归档格式由运行打包流程的宿主平台决定，与目标平台无关。
    """

    @staticmethod
    def format_for_host(host_family: Optional[str] = None) -> ArchiveFormat:
        """宿主平台偏好的归档格式"""
        host_family = host_family or detect_host_family()
        if host_family in (HostFamily.MACOS, HostFamily.WINDOWS):
            return ArchiveFormat.ZIP
        return ArchiveFormat.TAR_GZ

    @staticmethod
    def create_archiver(
        archive_format: ArchiveFormat = ArchiveFormat.AUTO,
        use_zip_utility: bool = True,
        host_family: Optional[str] = None,
    ) -> Archiver:
        """创建归档器

        Raises:
            ArchiveError: 不支持的格式
        """
        if archive_format == ArchiveFormat.AUTO:
            archive_format = ArchiverFactory.format_for_host(host_family)

        if archive_format == ArchiveFormat.ZIP:
            archiver = ZipArchiver(use_utility=use_zip_utility)
            if use_zip_utility and archiver.utility_path() is None:
                warning("未找到 zip 工具，回退到内置 zipfile", stage=LogStage.ARCHIVE)
            return archiver

        if archive_format == ArchiveFormat.TAR_GZ:
            return TarGzArchiver()

        raise ArchiveError(f"不支持的归档格式: {archive_format}")

"""
归档步骤模块

把暂存目录压缩成平台对应格式的单个归档文件。
"""

from typing import Optional

from ...utils import format_size
from ...utils.logging import info, success, LogStage
from distpack.build.archiver import ArchiveError, Archiver, ArchiverFactory
from distpack.build.build_context import (
    ArchiveCreationFailed,
    PackageContext,
    PackageStage,
)
from .build_step import BuildStep


class ArchiveStep(BuildStep):
    """归档步骤"""

    def __init__(self, archiver: Optional[Archiver] = None):
        super().__init__("archive", "压缩暂存目录", PackageStage.ARCHIVING)
        self._archiver = archiver

    def get_progress_range(self) -> tuple[int, int]:
        return (65, 85)

    def get_archiver(self, context: PackageContext) -> Archiver:
        """获取归档器，未注入时按配置和宿主平台创建"""
        if self._archiver is None:
            self._archiver = ArchiverFactory.create_archiver(
                context.config.archive.format,
                context.config.archive.use_zip_utility,
            )
        return self._archiver

    def execute(self, context: PackageContext) -> None:
        """创建归档"""
        if context.staging_dir is None:
            raise ArchiveCreationFailed("暂存目录尚未创建")

        try:
            archiver = self.get_archiver(context)
            info(f"归档格式: {archiver.get_format().value}", stage=LogStage.ARCHIVE)
            context.report(self.get_progress_range()[0], "压缩中...")

            # 先登记预期路径，失败时流水线可以清理残留文件
            context.archive_path = archiver.archive_path_for(context.staging_dir)
            archive_path = archiver.create(context.staging_dir)
        except ArchiveError as e:
            raise ArchiveCreationFailed(str(e)) from e

        context.archive_path = archive_path
        size = archive_path.stat().st_size
        context.stats['archive_size'] = size
        context.report(self.get_progress_range()[1], f"归档完成，大小: {format_size(size)}")
        success(f"归档完成: {archive_path.name} ({format_size(size)})", stage=LogStage.ARCHIVE)

"""
校验和步骤模块

计算归档的 SHA-256 并把校验文件写入输出目录。
"""

from typing import Optional

from ...utils import ensure_directory
from ...utils.logging import info, success, LogStage
from distpack.build.build_context import (
    ChecksumComputationFailed,
    PackageContext,
    PackageStage,
)
from distpack.build.checksum import ChecksumConvention, select_convention, write_checksum_record
from .build_step import BuildStep


class ChecksumStep(BuildStep):
    """校验和步骤"""

    def __init__(self, convention: Optional[ChecksumConvention] = None):
        super().__init__("checksum", "计算归档校验和", PackageStage.CHECKSUMMING)
        self._convention = convention

    def get_progress_range(self) -> tuple[int, int]:
        return (85, 95)

    def get_convention(self, context: PackageContext) -> ChecksumConvention:
        if self._convention is None:
            self._convention = select_convention(context.config.checksum.tool)
        return self._convention

    def execute(self, context: PackageContext) -> None:
        """计算并写入校验文件"""
        archive_path = context.archive_path
        if archive_path is None or not archive_path.is_file():
            raise ChecksumComputationFailed(f"归档文件不存在: {archive_path}")

        convention = self.get_convention(context)
        info(f"校验文件约定: .{convention.extension} ({convention.verify_command})", stage=LogStage.CHECKSUM)

        ensure_directory(context.output_dir)
        # 只登记本次写成的校验文件，失败时不能清理掉上一次运行的记录
        try:
            digest, record_path = write_checksum_record(archive_path, context.output_dir, convention)
        except OSError as e:
            raise ChecksumComputationFailed(f"计算校验和失败 {archive_path}: {e}") from e

        context.digest = digest
        context.checksum_path = record_path
        context.report(self.get_progress_range()[1], "校验和完成")
        success(f"SHA-256 {digest}", stage=LogStage.CHECKSUM)

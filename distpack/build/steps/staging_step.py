"""
暂存步骤模块

创建全新的暂存目录，放入改名后的产物和附带文件。
"""

import shutil
from pathlib import Path

from ...utils import ensure_directory, remove_tree
from ...utils.logging import info, success, debug, LogStage
from distpack.build.build_context import (
    FilesystemError,
    PackageContext,
    PackageStage,
    RequiredAssetMissing,
)
from distpack.build.targets import binary_suffix
from .build_step import BuildStep


class StagingStep(BuildStep):
    """暂存步骤"""

    def __init__(self):
        super().__init__("stage", "组装暂存目录", PackageStage.STAGING)

    def get_progress_range(self) -> tuple[int, int]:
        return (50, 65)

    @staticmethod
    def _resolve(context: PackageContext, path: Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else context.work_dir / path

    def execute(self, context: PackageContext) -> None:
        """组装暂存目录"""
        assets = context.config.assets
        binary = context.binary_path
        license_file = self._resolve(context, assets.license)
        readme_file = self._resolve(context, assets.readme)

        # 必需文件先检查，避免留下半成品目录
        if binary is None or not binary.is_file():
            raise RequiredAssetMissing(f"构建产物不存在: {binary}")
        for label, path in (("许可证", license_file), ("说明文件", readme_file)):
            if not path.is_file():
                raise RequiredAssetMissing(f"{label}文件不存在: {path}")

        staging_dir = context.work_dir / context.staging_name
        info(f"暂存目录: {staging_dir.name}", stage=LogStage.STAGE)

        try:
            if remove_tree(staging_dir):
                debug(f"已删除残留的暂存目录 {staging_dir}", stage=LogStage.STAGE)
            ensure_directory(staging_dir)
            context.staging_dir = staging_dir

            product_binary = f"{context.product_name}{binary_suffix(context.target)}"
            copies = [
                (binary, staging_dir / product_binary),
                (license_file, staging_dir / assets.license_name),
                (readme_file, staging_dir / readme_file.name),
            ]
            for optional in assets.optional:
                optional_path = self._resolve(context, optional)
                if optional_path.is_file():
                    copies.append((optional_path, staging_dir / optional_path.name))
                else:
                    debug(f"可选文件不存在，跳过: {optional_path.name}", stage=LogStage.STAGE)

            for source, destination in copies:
                shutil.copy2(source, destination)
                debug(f"复制 {source} -> {destination.name}", stage=LogStage.STAGE)

        except OSError as e:
            raise FilesystemError(f"组装暂存目录失败 {staging_dir}: {e}") from e

        context.stats['staged_files'] = len(copies)
        context.report(self.get_progress_range()[1], f"已暂存 {len(copies)} 个文件")
        success(f"暂存完成 - {len(copies)} 个文件", stage=LogStage.STAGE)

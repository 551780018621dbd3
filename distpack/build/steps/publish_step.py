"""
发布步骤模块

把归档移入输出目录并删除暂存目录。
"""

from ...utils import ensure_directory, move_file, remove_tree
from ...utils.logging import info, success, LogStage
from distpack.build.build_context import (
    FilesystemError,
    PackageContext,
    PackageStage,
)
from .build_step import BuildStep


class PublishStep(BuildStep):
    """发布步骤"""

    def __init__(self):
        super().__init__("publish", "移动归档到输出目录", PackageStage.PUBLISHING)

    def get_progress_range(self) -> tuple[int, int]:
        return (95, 100)

    def execute(self, context: PackageContext) -> None:
        """移动归档并清理暂存目录"""
        archive_path = context.archive_path
        if archive_path is None or not archive_path.is_file():
            raise FilesystemError(f"归档文件不存在: {archive_path}")

        destination = context.output_dir / archive_path.name
        try:
            ensure_directory(context.output_dir)
            if archive_path.resolve() != destination.resolve():
                move_file(archive_path, destination)
            context.published_archive = destination
            info(f"已发布: {destination}", stage=LogStage.PUBLISH)

            if context.staging_dir is not None and remove_tree(context.staging_dir):
                info(f"已删除暂存目录: {context.staging_dir.name}", stage=LogStage.PUBLISH)
        except OSError as e:
            raise FilesystemError(f"发布归档失败 {archive_path} -> {destination}: {e}") from e

        context.report(self.get_progress_range()[1], "完成")
        success(f"{context.target} 打包完成", stage=LogStage.PUBLISH)

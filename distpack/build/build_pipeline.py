"""
构建管道模块

使用管道模式为单个目标依次执行 构建 → 暂存 → 归档 → 校验 → 发布。
任一步骤失败都会中止，并清理该目标留下的暂存目录和未发布的归档。
"""

import time
from typing import List, Optional

from ..utils.logging import debug, error, warning, LogStage
from ..utils.paths import remove_file, remove_tree
from .build_context import FilesystemError, PackageContext, PackageStage, PackagingError
from .steps.build_step import BuildStep
from .steps.compile_step import CompileStep
from .steps.staging_step import StagingStep
from .steps.archive_step import ArchiveStep
from .steps.checksum_step import ChecksumStep
from .steps.publish_step import PublishStep


class TargetPipeline:
    """单目标打包管道，负责协调打包步骤的执行"""

    def __init__(self, steps: Optional[List[BuildStep]] = None):
        """初始化打包管道

        Args:
            steps: 自定义步骤列表，默认使用标准的五个步骤
        """
        self._steps: List[BuildStep] = list(steps) if steps is not None else self._default_steps()

    @staticmethod
    def _default_steps() -> List[BuildStep]:
        return [
            CompileStep(),
            StagingStep(),
            ArchiveStep(),
            ChecksumStep(),
            PublishStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None) -> None:
        """添加打包步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str) -> None:
        """移除打包步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有打包步骤"""
        return self._steps.copy()

    def execute(self, context: PackageContext) -> PackageContext:
        """为一个目标执行打包管道

        Returns:
            PackageContext: 填充了产物路径的上下文

        Raises:
            PackagingError: 任一步骤失败，附带失败的目标和阶段
        """
        context.stats['start_time'] = time.time()

        try:
            for step in self._steps:
                context.stage = step.stage
                debug(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.execute(context)

            context.stage = PackageStage.DONE
            return context

        except PackagingError as e:
            e.target = e.target or context.target
            e.stage = e.stage or context.stage
            error(f"{context.target} 在 {context.stage} 阶段失败: {e.message}", stage=LogStage.BUILD)
            self._cleanup(context)
            raise
        except OSError as e:
            wrapped = FilesystemError(str(e), target=context.target, stage=context.stage)
            error(f"{context.target} 在 {context.stage} 阶段失败: {e}", stage=LogStage.BUILD)
            self._cleanup(context)
            raise wrapped from e
        finally:
            context.stats['end_time'] = time.time()

    def _cleanup(self, context: PackageContext) -> None:
        """清理失败目标留下的暂存目录、未发布的归档及其校验文件"""
        try:
            if context.staging_dir is not None and remove_tree(context.staging_dir):
                debug(f"已清理暂存目录 {context.staging_dir}", stage=LogStage.BUILD)
            if context.published_archive is None:
                if context.archive_path is not None and remove_file(context.archive_path):
                    debug(f"已清理未发布的归档 {context.archive_path}", stage=LogStage.BUILD)
                if context.checksum_path is not None and remove_file(context.checksum_path):
                    debug(f"已清理校验文件 {context.checksum_path}", stage=LogStage.BUILD)
        except OSError as e:
            # 清理失败不应覆盖原始错误
            warning(f"清理 {context.target} 的临时文件失败: {e}", stage=LogStage.BUILD)

    def validate_pipeline(self) -> List[str]:
        """验证管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("管道中没有步骤")
            return errors

        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"管道的总进度范围不是100%: {prev_end}%")

        return errors

"""
编译步骤模块

调用外部构建系统为单个目标构建 release 产物，并确认产物位于约定路径。
"""

import subprocess
from pathlib import Path
from typing import Callable, List

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from distpack.build.build_context import (
    BinaryNotFound,
    BuildFailed,
    PackageContext,
    PackageStage,
)
from distpack.build.targets import binary_suffix
from distpack.config.schema import TARGET_PLACEHOLDER
from .build_step import BuildStep


class CompileStep(BuildStep):
    """编译步骤"""

    def __init__(self, runner: Callable = subprocess.run):
        super().__init__("build", "构建 release 产物", PackageStage.BUILDING)
        self._runner = runner

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 50)

    @staticmethod
    def build_command(context: PackageContext) -> List[str]:
        """替换 {target} 占位符后的构建命令"""
        return [part.replace(TARGET_PLACEHOLDER, context.target) for part in context.config.build.command]

    @staticmethod
    def expected_binary(context: PackageContext) -> Path:
        """<target_dir>/<target>/release/<crate>[.exe]"""
        target_dir = Path(context.config.build.target_dir)
        if not target_dir.is_absolute():
            target_dir = context.work_dir / target_dir
        binary_name = f"{context.crate_name}{binary_suffix(context.target)}"
        return target_dir / context.target / "release" / binary_name

    def execute(self, context: PackageContext) -> None:
        """构建并定位产物"""
        cmd = self.build_command(context)
        info(f"构建 {context.product_name} {context.version} ({context.target})", stage=LogStage.BUILD)
        debug(f"执行: {' '.join(cmd)}", stage=LogStage.BUILD)
        context.report(self.get_progress_range()[0], "构建中...")

        try:
            result = self._runner(
                cmd,
                cwd=str(context.work_dir),
                capture_output=True,
                text=True,
                timeout=context.config.build.timeout_sec,
            )
        except subprocess.TimeoutExpired as e:
            raise BuildFailed(f"构建超时 ({e.timeout} 秒): {' '.join(cmd)}") from e
        except OSError as e:
            raise BuildFailed(f"无法执行构建命令 {cmd[0]}: {e}") from e

        if result.returncode != 0:
            error(f"构建命令返回 {result.returncode}", stage=LogStage.BUILD)
            if result.stderr:
                error(result.stderr.strip(), stage=LogStage.BUILD)
            if result.stdout:
                debug(result.stdout.strip(), stage=LogStage.BUILD)
            raise BuildFailed(f"构建失败 (退出码 {result.returncode}): {' '.join(cmd)}")

        binary_path = self.expected_binary(context)
        if not binary_path.is_file():
            raise BinaryNotFound(f"未在预期位置找到构建产物: {binary_path}")

        context.binary_path = binary_path
        context.report(self.get_progress_range()[1], "构建完成")
        success(f"构建完成: {binary_path} ({format_size(binary_path.stat().st_size)})", stage=LogStage.BUILD)

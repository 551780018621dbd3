"""
打包器主类

负责整个发布流程的协调：启动时解析版本与目标列表，
然后逐个目标顺序执行打包管道。任何错误都会终止整个运行。
"""

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple, Union

from ..config.schema import DistpackConfig
from ..utils import ensure_directory, format_size
from ..utils.logging import info, success, error, LogStage
from .build_context import (
    FilesystemError,
    PackageContext,
    PackagingError,
    ProgressCallback,
)
from .build_pipeline import TargetPipeline
from .manifest import ManifestReader
from .targets import resolve_targets


@dataclass
class ArtifactInfo:
    """单个目标的发布产物"""
    target: str
    archive_path: Path
    checksum_path: Path
    digest: str
    size: int


@dataclass
class PackageResult:
    """打包结果"""
    success: bool
    version: Optional[str] = None
    product_name: Optional[str] = None
    targets: List[str] = field(default_factory=list)
    artifacts: List[ArtifactInfo] = field(default_factory=list)
    output_dir: Optional[Path] = None
    elapsed: Optional[float] = None
    error: Optional[str] = None
    failed_target: Optional[str] = None
    failed_stage: Optional[str] = None
    error_type: Optional[str] = None


class ReleasePackager:
    """发布打包器

    使用管道模式逐个目标执行打包，提供统一的入口。
    """

    def __init__(
        self,
        config: Optional[DistpackConfig] = None,
        work_dir: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        pipeline: Optional[TargetPipeline] = None,
        target_resolver: Callable[..., List[str]] = resolve_targets,
    ):
        """初始化打包器

        Args:
            config: 配置对象，默认全部使用内置默认值
            work_dir: 工作目录（暂存目录所在位置，相对路径的基准），默认当前目录
            environ: 环境变量（默认 os.environ）
            pipeline: 自定义单目标管道
            target_resolver: 目标列表解析函数
        """
        self.config = config or DistpackConfig()
        self.work_dir = Path(work_dir or Path.cwd()).resolve()
        self.environ = os.environ if environ is None else environ
        self.pipeline = pipeline or TargetPipeline()
        self._target_resolver = target_resolver

    def _resolve_path(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.work_dir / path

    @property
    def output_dir(self) -> Path:
        return self._resolve_path(self.config.output_dir)

    @property
    def manifest_path(self) -> Path:
        return self._resolve_path(self.config.manifest)

    def resolve_names(self, reader: ManifestReader) -> Tuple[str, str]:
        """解析 (crate 名称, 产品名称)

        未配置时 crate 名称取清单的 name 字段，产品名称默认与 crate 相同。
        """
        crate_name = self.config.product.crate or reader.read_name()
        product_name = self.config.product.name or crate_name
        return crate_name, product_name

    def package(self, progress_callback: Optional[ProgressCallback] = None) -> PackageResult:
        """执行完整的打包流程

        Args:
            progress_callback: 进度回调函数

        Returns:
            PackageResult: 打包结果，失败时 success 为 False 并带有失败的目标与阶段
        """
        start_time = time.time()
        result = PackageResult(success=False, output_dir=self.output_dir)

        try:
            reader = ManifestReader(self.manifest_path)
            result.version = reader.read_version()
            crate_name, result.product_name = self.resolve_names(reader)
            result.targets = self._target_resolver(self.config.targets, self.environ)

            info(
                f"打包 {result.product_name} v{result.version}，目标: {' '.join(result.targets)}",
                stage=LogStage.INIT,
            )

            try:
                ensure_directory(self.output_dir)
            except OSError as e:
                raise FilesystemError(f"无法创建输出目录 {self.output_dir}: {e}") from e

            for target in result.targets:
                context = PackageContext(
                    config=self.config,
                    target=target,
                    version=result.version,
                    product_name=result.product_name,
                    crate_name=crate_name,
                    work_dir=self.work_dir,
                    output_dir=self.output_dir,
                    progress_callback=progress_callback,
                )
                self.pipeline.execute(context)
                result.artifacts.append(ArtifactInfo(
                    target=target,
                    archive_path=context.published_archive,
                    checksum_path=context.checksum_path,
                    digest=context.digest,
                    size=context.stats['archive_size'],
                ))

        except PackagingError as e:
            result.error = e.message
            result.failed_target = e.target
            result.failed_stage = e.stage
            result.error_type = type(e).__name__
            result.elapsed = time.time() - start_time
            error(f"打包失败: {e}", stage=LogStage.DONE)
            return result

        result.success = True
        result.elapsed = time.time() - start_time
        total = sum(a.size for a in result.artifacts)
        success(
            f"完成 {len(result.artifacts)} 个目标，共 {format_size(total)}，产物位于 {self.output_dir}",
            stage=LogStage.DONE,
        )
        return result

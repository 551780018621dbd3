"""
构建上下文模块

定义单个目标平台打包过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..config.schema import DistpackConfig

# 进度回调类型: (target, current, total, message)
ProgressCallback = Callable[[str, int, int, str], None]


class PackageStage:
    """单个目标的打包状态"""
    PENDING = "pending"
    BUILDING = "building"
    STAGING = "staging"
    ARCHIVING = "archiving"
    CHECKSUMMING = "checksumming"
    PUBLISHING = "publishing"
    DONE = "done"


class PackagingError(Exception):
    """打包错误基类

    流水线会在抛出时补充 target 和 stage，便于定位失败位置。
    """

    def __init__(self, message: str, target: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.target = target
        self.stage = stage

    def __str__(self) -> str:
        if self.target and self.stage:
            return f"[{self.target} @ {self.stage}] {self.message}"
        if self.target:
            return f"[{self.target}] {self.message}"
        return self.message


class ManifestFieldNotFound(PackagingError):
    """清单中找不到字段"""
    pass


class VersionNotFound(ManifestFieldNotFound):
    """清单中找不到版本号"""
    pass


class NoTargetsSpecified(PackagingError):
    """没有可构建的目标平台"""
    pass


class InvalidTargetName(PackagingError):
    """目标平台名称不能作为目录名使用"""
    pass


class BuildFailed(PackagingError):
    """构建系统调用失败，终止整个流程"""
    pass


class BinaryNotFound(PackagingError):
    """构建成功但预期位置没有产物"""
    pass


class RequiredAssetMissing(PackagingError):
    """必需的附带文件缺失"""
    pass


class ArchiveCreationFailed(PackagingError):
    """归档失败"""
    pass


class ChecksumComputationFailed(PackagingError):
    """校验和计算失败"""
    pass


class FilesystemError(PackagingError):
    """通用的复制/移动/建目录失败"""
    pass


@dataclass
class PackageContext:
    """单个目标的打包上下文，在各步骤之间传递"""
    config: DistpackConfig
    target: str
    version: str
    product_name: str
    crate_name: str
    work_dir: Path
    output_dir: Path
    progress_callback: Optional[ProgressCallback] = None

    stage: str = PackageStage.PENDING

    # 各步骤产生的数据
    binary_path: Optional[Path] = None
    staging_dir: Optional[Path] = None
    archive_path: Optional[Path] = None
    digest: Optional[str] = None
    checksum_path: Optional[Path] = None
    published_archive: Optional[Path] = None

    stats: Dict[str, Any] = field(default_factory=lambda: {
        'start_time': 0.0,
        'end_time': 0.0,
        'staged_files': 0,
        'archive_size': 0,
    })

    @property
    def staging_name(self) -> str:
        """暂存目录名: {Product}_v{Version}_{Target}"""
        return f"{self.product_name}_v{self.version}_{self.target}"

    def report(self, current: int, message: str = "") -> None:
        """回调进度（百分比）"""
        if self.progress_callback:
            self.progress_callback(self.target, current, 100, message)

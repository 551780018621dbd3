"""打包服务模块

提供发布打包流程的核心功能。
"""

from .build_context import (
    PackageContext,
    PackageStage,
    PackagingError,
    ManifestFieldNotFound,
    VersionNotFound,
    NoTargetsSpecified,
    InvalidTargetName,
    BuildFailed,
    BinaryNotFound,
    RequiredAssetMissing,
    ArchiveCreationFailed,
    ChecksumComputationFailed,
    FilesystemError,
)
from .manifest import ManifestReader, resolve_version
from .targets import resolve_targets, detect_host_family, binary_suffix
from .archiver import (
    Archiver,
    ArchiverFactory,
    ArchiveError,
    ZipArchiver,
    TarGzArchiver,
)
from .checksum import (
    ChecksumConvention,
    HashCalculator,
    select_convention,
    verify_dist,
)
from .build_pipeline import TargetPipeline
from .packager import ReleasePackager, PackageResult, ArtifactInfo

__all__ = [
    # 主打包器
    "ReleasePackager",
    "PackageResult",
    "ArtifactInfo",
    "TargetPipeline",
    "PackageContext",
    "PackageStage",

    # 错误
    "PackagingError",
    "ManifestFieldNotFound",
    "VersionNotFound",
    "NoTargetsSpecified",
    "InvalidTargetName",
    "BuildFailed",
    "BinaryNotFound",
    "RequiredAssetMissing",
    "ArchiveCreationFailed",
    "ChecksumComputationFailed",
    "FilesystemError",

    # 启动阶段解析
    "ManifestReader",
    "resolve_version",
    "resolve_targets",
    "detect_host_family",
    "binary_suffix",

    # 归档
    "Archiver",
    "ArchiverFactory",
    "ArchiveError",
    "ZipArchiver",
    "TarGzArchiver",

    # 校验和
    "ChecksumConvention",
    "HashCalculator",
    "select_convention",
    "verify_dist",
]

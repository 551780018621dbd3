"""单目标打包步骤"""

from .build_step import BuildStep
from .compile_step import CompileStep
from .staging_step import StagingStep
from .archive_step import ArchiveStep
from .checksum_step import ChecksumStep
from .publish_step import PublishStep

__all__ = [
    "BuildStep",
    "CompileStep",
    "StagingStep",
    "ArchiveStep",
    "ChecksumStep",
    "PublishStep",
]

"""
distpack - 多目标平台发布打包工具

Builds release binaries per target, stages them with license/readme files,
archives each staging directory and writes a SHA-256 checksum next to it in dist/.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import DistpackConfig
from .build.packager import ReleasePackager

__all__ = ["DistpackConfig", "ReleasePackager", "__version__"]

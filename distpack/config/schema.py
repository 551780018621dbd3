"""
配置 Schema 定义

使用 Pydantic 定义打包流程的 YAML 配置模型，所有部分均有默认值，
没有配置文件时也可以直接使用 ``DistpackConfig()``。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.paths import is_safe_filename


TARGET_PLACEHOLDER = "{target}"


class ArchiveFormat(str, Enum):
    """归档格式枚举"""
    AUTO = "auto"
    ZIP = "zip"
    TAR_GZ = "tar.gz"


class ChecksumTool(str, Enum):
    """校验工具约定枚举"""
    AUTO = "auto"
    SHA256SUM = "sha256sum"
    SHASUM = "shasum"


class ProductModel(BaseModel):
    """产品信息模型"""
    name: Optional[str] = Field(None, description="对外发布的产品名称（默认使用 crate 名称）", max_length=100)
    crate: Optional[str] = Field(None, description="构建产物的内部名称（默认读取清单的 name 字段）", max_length=100)

    @field_validator('name', 'crate')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """名称会成为文件名的一部分，不能包含路径分隔符"""
        if v is None:
            return None
        v = v.strip()
        if not is_safe_filename(v):
            raise ValueError(f"名称不能作为文件名使用: {v!r}")
        return v


class BuildModel(BaseModel):
    """构建系统配置模型"""
    command: List[str] = Field(
        default_factory=lambda: ["cargo", "build", "--release", "--quiet", "--target", TARGET_PLACEHOLDER],
        description="构建命令，{target} 会被替换为目标平台",
    )
    target_dir: Path = Field(Path("target"), description="构建输出根目录")
    timeout_sec: Optional[int] = Field(None, description="构建超时时间（秒）", ge=1)

    @field_validator('command')
    @classmethod
    def validate_command(cls, v: List[str]) -> List[str]:
        """验证构建命令"""
        if not v or not v[0].strip():
            raise ValueError("构建命令不能为空")
        if not any(TARGET_PLACEHOLDER in part for part in v):
            raise ValueError(f"构建命令必须包含 {TARGET_PLACEHOLDER} 占位符")
        return v


class AssetsModel(BaseModel):
    """随包附带文件配置模型"""
    license: Path = Field(Path("LICENSE"), description="许可证文件")
    license_name: str = Field("LICENSE.txt", description="许可证在包内的文件名")
    readme: Path = Field(Path("README.md"), description="说明文件（保留原文件名）")
    optional: List[Path] = Field(
        default_factory=lambda: [Path("THIRD_PARTY_LICENSES.txt"), Path("THIRD_PARTY_NOTICES.txt")],
        description="可选的第三方许可/声明文件，存在时才复制",
    )

    @field_validator('license_name')
    @classmethod
    def validate_license_name(cls, v: str) -> str:
        if not is_safe_filename(v):
            raise ValueError(f"许可证文件名不合法: {v!r}")
        return v


class ArchiveModel(BaseModel):
    """归档配置模型"""
    format: ArchiveFormat = Field(ArchiveFormat.AUTO, description="归档格式（auto 按宿主平台选择）")
    use_zip_utility: bool = Field(True, description="zip 格式时优先使用系统 zip 工具")


class ChecksumModel(BaseModel):
    """校验和配置模型"""
    tool: ChecksumTool = Field(ChecksumTool.AUTO, description="校验文件遵循的工具约定")


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class DistpackConfig(BaseModel):
    """distpack 主配置模型

    这是整个配置文件的根模型，包含所有配置部分。
    """

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")
    product: ProductModel = Field(default_factory=ProductModel, description="产品信息")
    manifest: Path = Field(Path("Cargo.toml"), description="版本清单文件")
    build: BuildModel = Field(default_factory=BuildModel, description="构建配置")
    targets: List[str] = Field(default_factory=list, description="目标平台列表（TARGETS 环境变量优先）")
    assets: AssetsModel = Field(default_factory=AssetsModel, description="附带文件配置")
    archive: ArchiveModel = Field(default_factory=ArchiveModel, description="归档配置")
    checksum: ChecksumModel = Field(default_factory=ChecksumModel, description="校验和配置")
    output_dir: Path = Field(Path("dist"), description="发布输出目录")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @field_validator('targets')
    @classmethod
    def validate_targets(cls, v: List[str]) -> List[str]:
        """目标名称会成为目录名的一部分"""
        for target in v:
            if not is_safe_filename(target):
                raise ValueError(f"目标平台名称不合法: {target!r}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return obj.as_posix()
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DistpackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)

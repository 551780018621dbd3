"""
校验和工具

计算归档的 SHA-256，并按照 sha256sum / shasum 的格式写入校验文件，
用户可以直接用 ``sha256sum -c`` 或 ``shasum -a 256 -c`` 校验。
"""

import hashlib
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple, Union

from ..config.schema import ChecksumTool
from ..utils.logging import debug, error, info, LogStage


class HashCalculator:
    """哈希计算器"""

    def __init__(self, algorithm: str = "sha256"):
        """初始化哈希计算器

        Args:
            algorithm: 哈希算法名称
        """
        self.algorithm = algorithm.lower()
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f"不支持的哈希算法: {algorithm}")

        self._hasher = hashlib.new(self.algorithm)

    def update(self, data: Union[bytes, str]) -> None:
        """更新哈希数据"""
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._hasher.update(data)

    def update_from_file(self, file_path: Path, chunk_size: int = 64 * 1024) -> None:
        """从文件更新哈希

        Raises:
            OSError: 文件读取失败
        """
        with open(file_path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                self._hasher.update(chunk)

    def hexdigest(self) -> str:
        """获取十六进制哈希值"""
        return self._hasher.hexdigest()

    @classmethod
    def hash_data(cls, data: Union[bytes, str], algorithm: str = "sha256") -> str:
        """便捷方法：计算数据哈希"""
        calculator = cls(algorithm)
        calculator.update(data)
        return calculator.hexdigest()

    @classmethod
    def hash_file(cls, file_path: Path, algorithm: str = "sha256") -> str:
        """便捷方法：计算文件哈希"""
        calculator = cls(algorithm)
        calculator.update_from_file(file_path)
        return calculator.hexdigest()


@dataclass(frozen=True)
class ChecksumConvention:
    """校验文件约定：对应的校验工具与扩展名"""
    tool: ChecksumTool
    extension: str
    verify_command: str

    def record_path(self, output_dir: Path, archive_name: str) -> Path:
        """校验文件路径: {output_dir}/{archive_name}.{ext}"""
        return output_dir / f"{archive_name}.{self.extension}"


SHA256SUM_CONVENTION = ChecksumConvention(ChecksumTool.SHA256SUM, "sha256sum", "sha256sum -c")
SHASUM_CONVENTION = ChecksumConvention(ChecksumTool.SHASUM, "sha256", "shasum -a 256 -c")

CHECKSUM_EXTENSIONS = (SHA256SUM_CONVENTION.extension, SHASUM_CONVENTION.extension)


def select_convention(tool: ChecksumTool = ChecksumTool.AUTO) -> ChecksumConvention:
    """选择校验文件约定

    auto 时按宿主上可用的工具选择：有 sha256sum 用 .sha256sum，否则用 shasum 的 .sha256。
    """
    if tool == ChecksumTool.SHA256SUM:
        return SHA256SUM_CONVENTION
    if tool == ChecksumTool.SHASUM:
        return SHASUM_CONVENTION
    if shutil.which("sha256sum"):
        return SHA256SUM_CONVENTION
    return SHASUM_CONVENTION


def format_record(digest: str, filename: str) -> str:
    """两列格式: <hex>  <filename>（两个空格，文本模式）"""
    return f"{digest}  {filename}\n"


def write_checksum_record(archive_path: Path, output_dir: Path,
                          convention: ChecksumConvention) -> Tuple[str, Path]:
    """计算归档摘要并写入校验文件

    Returns:
        Tuple[str, Path]: (digest, record_path)

    Raises:
        OSError: 归档无法读取或校验文件无法写入
    """
    digest = HashCalculator.hash_file(archive_path)
    record_path = convention.record_path(output_dir, archive_path.name)

    # 先写临时文件再替换，失败时上一次运行留下的校验文件保持不变
    temp_path = record_path.with_name(record_path.name + ".tmp")
    try:
        temp_path.write_text(format_record(digest, archive_path.name), encoding='utf-8')
        os.replace(temp_path, record_path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise
    debug(f"写入校验文件 {record_path.name}: {digest}", stage=LogStage.CHECKSUM)
    return digest, record_path


def parse_checksum_record(record_path: Path) -> Dict[str, str]:
    """解析校验文件为 {filename: digest}

    Raises:
        ValueError: 格式不正确
        OSError: 文件无法读取
    """
    checksums: Dict[str, str] = {}
    content = record_path.read_text(encoding='utf-8')

    for line_num, line in enumerate(content.splitlines(), start=1):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        # 二进制模式下文件名前带 *
        parts = line.split(" ", 1)
        if len(parts) != 2 or len(parts[1]) < 2 or parts[1][0] not in (" ", "*"):
            raise ValueError(f"{record_path.name} 第 {line_num} 行格式不正确: {line!r}")
        digest, filename = parts[0].lower(), parts[1][1:]
        if len(digest) != 64 or any(c not in "0123456789abcdef" for c in digest):
            raise ValueError(f"{record_path.name} 第 {line_num} 行不是 SHA-256 摘要")
        checksums[filename] = digest

    return checksums


@dataclass
class VerificationResult:
    """校验结果"""
    checked: List[str] = field(default_factory=list)
    mismatches: List[str] = field(default_factory=list)
    missing_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not (self.mismatches or self.missing_files or self.errors)


def verify_dist(output_dir: Union[str, Path]) -> VerificationResult:
    """校验输出目录中所有校验文件引用的归档"""
    output_dir = Path(output_dir)
    result = VerificationResult()

    if not output_dir.is_dir():
        result.errors.append(f"输出目录不存在: {output_dir}")
        return result

    records = sorted(
        p for p in output_dir.iterdir()
        if p.is_file() and p.name.rsplit(".", 1)[-1] in CHECKSUM_EXTENSIONS
    )
    if not records:
        result.errors.append(f"输出目录中没有校验文件: {output_dir}")
        return result

    for record in records:
        try:
            expected = parse_checksum_record(record)
        except (ValueError, OSError) as e:
            result.errors.append(str(e))
            continue

        for filename, expected_digest in expected.items():
            archive = output_dir / filename
            if not archive.is_file():
                result.missing_files.append(filename)
                error(f"归档缺失: {filename}", stage=LogStage.VERIFY)
                continue

            try:
                actual = HashCalculator.hash_file(archive)
            except OSError as e:
                result.errors.append(f"读取归档失败 {filename}: {e}")
                error(f"读取归档失败: {filename}", stage=LogStage.VERIFY)
                continue

            if actual != expected_digest:
                result.mismatches.append(filename)
                error(f"校验不匹配: {filename}", stage=LogStage.VERIFY)
            else:
                result.checked.append(filename)
                info(f"{filename}: OK", stage=LogStage.VERIFY)

    return result

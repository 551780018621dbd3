"""
测试公共夹具

用一个 Python 脚本模拟外部构建系统：它在 target/<target>/release/ 下写出产物。
以 broken 开头的目标会构建失败，以 nobinary 开头的目标构建成功但不产生产物。
"""

import sys
import textwrap
from pathlib import Path

import pytest

from distpack.build.build_context import PackageContext
from distpack.config.schema import DistpackConfig


FAKE_BUILD_SCRIPT = textwrap.dedent(
    """
    import sys
    from pathlib import Path

    target, crate = sys.argv[1], sys.argv[2]
    if target.startswith("broken"):
        sys.stderr.write("error: could not compile for " + target + "\\n")
        sys.exit(101)
    if target.startswith("nobinary"):
        sys.exit(0)

    suffix = ".exe" if "windows" in target else ""
    out = Path("target") / target / "release" / (crate + suffix)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(("binary for " + target + "\\n").encode("utf-8"))
    out.chmod(0o755)
    """
)

CARGO_TOML = textwrap.dedent(
    """
    [package]
    name = "widget"
    version = "0.4.1"
    edition = "2021"

    [dependencies]
    serde = { version = "1.0" }
    """
).lstrip()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """带清单、许可证、说明文件和伪构建脚本的项目目录"""
    root = tmp_path / "project"
    root.mkdir()
    (root / "Cargo.toml").write_text(CARGO_TOML, encoding="utf-8")
    (root / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    (root / "README.md").write_text("# Widget\n", encoding="utf-8")
    (root / "fake_build.py").write_text(FAKE_BUILD_SCRIPT, encoding="utf-8")
    return root


def make_config_data(project: Path, **overrides) -> dict:
    """测试用配置字典（相对路径相对于项目目录）"""
    data = {
        "product": {"name": "Widget", "crate": "widget"},
        "build": {"command": [sys.executable, str(project / "fake_build.py"), "{target}", "widget"]},
        "archive": {"format": "tar.gz", "use_zip_utility": False},
        "checksum": {"tool": "sha256sum"},
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_config(project: Path):
    """配置工厂"""
    def factory(**overrides) -> DistpackConfig:
        return DistpackConfig.from_dict(make_config_data(project, **overrides))
    return factory


@pytest.fixture
def make_context(project: Path, make_config):
    """单目标打包上下文工厂"""
    def factory(target: str = "x86_64-a", config: DistpackConfig = None) -> PackageContext:
        return PackageContext(
            config=config or make_config(),
            target=target,
            version="0.4.1",
            product_name="Widget",
            crate_name="widget",
            work_dir=project,
            output_dir=project / "dist",
        )
    return factory


@pytest.fixture
def built_binary(project: Path):
    """直接写出一个产物，跳过构建步骤"""
    def factory(target: str = "x86_64-a") -> Path:
        binary = project / "target" / target / "release" / "widget"
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_bytes(b"binary for " + target.encode() + b"\n")
        binary.chmod(0o755)
        return binary
    return factory

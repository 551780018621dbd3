"""
配置系统单元测试
"""

from pathlib import Path

import pytest

from distpack.config import (
    ConfigError,
    ConfigValidationError,
    DistpackConfig,
    config_loader,
    load_config,
    save_config,
    validate_config,
)
from distpack.config.schema import ArchiveFormat, ChecksumTool


class TestConfigSchema:
    """配置 Schema 测试"""

    def test_defaults(self):
        """测试默认配置与发布脚本的约定一致"""
        config = DistpackConfig()

        assert config.manifest == Path("Cargo.toml")
        assert config.output_dir == Path("dist")
        assert config.targets == []
        assert config.build.command == ["cargo", "build", "--release", "--quiet", "--target", "{target}"]
        assert config.build.target_dir == Path("target")
        assert config.assets.license == Path("LICENSE")
        assert config.assets.license_name == "LICENSE.txt"
        assert config.assets.readme == Path("README.md")
        assert config.assets.optional == [Path("THIRD_PARTY_LICENSES.txt"), Path("THIRD_PARTY_NOTICES.txt")]
        assert config.archive.format == ArchiveFormat.AUTO
        assert config.checksum.tool == ChecksumTool.AUTO

    def test_default_paths_match_loaded_paths(self):
        """测试默认值与加载值同为 Path 类型"""
        default = DistpackConfig()
        loaded = DistpackConfig.from_dict({
            "manifest": "Cargo.toml",
            "output_dir": "dist",
            "build": {"target_dir": "target"},
            "assets": {"license": "LICENSE", "readme": "README.md"},
        })

        for config in (default, loaded):
            assert isinstance(config.manifest, Path)
            assert isinstance(config.output_dir, Path)
            assert isinstance(config.build.target_dir, Path)
            assert isinstance(config.assets.license, Path)
            assert isinstance(config.assets.readme, Path)
        assert loaded == default

    def test_assignment_converts_to_path(self):
        """测试赋值时字符串转换为 Path"""
        config = DistpackConfig()
        config.output_dir = "out"
        assert config.output_dir == Path("out")

    def test_extra_fields_forbidden(self):
        """测试未知字段被拒绝"""
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"unknown": 1})

    def test_command_requires_placeholder(self):
        """测试构建命令必须包含 {target}"""
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"build": {"command": ["cargo", "build"]}})

    def test_empty_command(self):
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"build": {"command": []}})

    def test_unsafe_product_name(self):
        """测试产品名不能包含路径分隔符"""
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"product": {"name": "../evil"}})

    def test_unsafe_target(self):
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"targets": ["x86_64/linux"]})

    def test_unsupported_config_version(self):
        with pytest.raises(ValueError):
            DistpackConfig.from_dict({"config": {"version": 2}})

    def test_to_dict_round_trip(self):
        """测试 to_dict 输出可以重新加载"""
        config = DistpackConfig.from_dict({
            "product": {"name": "Widget"},
            "archive": {"format": "zip"},
            "checksum": {"tool": "shasum"},
        })
        data = config.to_dict()

        assert data["archive"]["format"] == "zip"
        assert data["checksum"]["tool"] == "shasum"
        assert data["manifest"] == "Cargo.toml"
        assert "crate" not in data["product"]
        assert DistpackConfig.from_dict(data) == config


class TestConfigLoader:
    """配置加载器测试"""

    def test_load_yaml(self, tmp_path):
        """测试加载 YAML 并相对配置文件解析路径"""
        config_file = tmp_path / "distpack.yaml"
        config_file.write_text(
            "product:\n"
            "  name: Widget\n"
            "targets:\n"
            "  - x86_64-unknown-linux-gnu\n"
            "assets:\n"
            "  license: legal/LICENSE\n"
            "  optional:\n"
            "    - NOTICE.txt\n"
            "archive:\n"
            "  format: tar.gz\n",
            encoding="utf-8",
        )

        config = load_config(config_file)
        base = tmp_path.resolve()

        assert config.product.name == "Widget"
        assert config.targets == ["x86_64-unknown-linux-gnu"]
        assert config.archive.format == ArchiveFormat.TAR_GZ
        assert config.assets.license == base / "legal" / "LICENSE"
        assert config.assets.optional == [base / "NOTICE.txt"]
        assert config.manifest == Path("Cargo.toml")

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "distpack.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_config(config_file).targets == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_wrong_extension(self, tmp_path):
        config_file = tmp_path / "distpack.json"
        config_file.write_text("{}", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "distpack.yaml"
        config_file.write_text("product: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_validation_error_details(self, tmp_path):
        """测试验证错误可以格式化输出"""
        config_file = tmp_path / "distpack.yaml"
        config_file.write_text("archive:\n  format: rar\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(config_file)

        formatted = exc_info.value.format_errors()
        assert "archive -> format" in formatted

    def test_validate_config(self, tmp_path):
        """测试 validate_config 返回错误列表"""
        good = tmp_path / "good.yaml"
        good.write_text("targets: [a, b]\n", encoding="utf-8")
        bad = tmp_path / "bad.yaml"
        bad.write_text("bogus: true\n", encoding="utf-8")

        assert validate_config(good) == []
        assert validate_config(bad)

    def test_load_default_without_file(self, tmp_path):
        """测试没有配置文件时使用内置默认值"""
        assert config_loader.load_default(tmp_path) == DistpackConfig()

    def test_load_default_with_file(self, tmp_path):
        (tmp_path / "distpack.yaml").write_text("targets: [x86_64-a]\n", encoding="utf-8")
        assert config_loader.load_default(tmp_path).targets == ["x86_64-a"]

    def test_save_and_reload(self, tmp_path):
        """测试保存后重新加载"""
        config = DistpackConfig.from_dict({"product": {"name": "Widget"}, "targets": ["a"]})
        output = tmp_path / "nested" / "distpack.yaml"

        save_config(config, output)
        reloaded = load_config(output)

        assert reloaded.product.name == "Widget"
        assert reloaded.targets == ["a"]

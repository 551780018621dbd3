"""
配置加载器

负责从 YAML 文件加载配置并进行验证。
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import DistpackConfig


DEFAULT_CONFIG_NAME = "distpack.yaml"


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            input_val = error.get('input', '')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
                if input_val:
                    formatted.append(f"  输入值: {input_val}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)


class ConfigLoader:
    """配置加载器"""

    # 需要相对配置文件目录解析的路径字段
    PATH_FIELDS = [
        ('manifest',),
        ('output_dir',),
        ('build', 'target_dir'),
        ('assets', 'license'),
        ('assets', 'readme'),
    ]

    def __init__(self):
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.yaml.width = 4096

    def load_from_file(self, config_path: Union[str, Path]) -> DistpackConfig:
        """从文件加载配置

        Args:
            config_path: 配置文件路径

        Returns:
            DistpackConfig: 验证后的配置实例

        Raises:
            ConfigError: 配置加载或验证错误
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"配置文件不存在: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"配置路径不是文件: {config_path}")

        if config_path.suffix.lower() not in ['.yaml', '.yml']:
            raise ConfigError(f"配置文件必须是 .yaml 或 .yml 格式: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}") from e
        except OSError as e:
            raise ConfigError(f"文件读取错误: {e}") from e

        # 空文件等价于全部使用默认值
        if raw_data is None:
            raw_data = {}

        if not isinstance(raw_data, dict):
            raise ConfigError("配置文件根级别必须是对象/字典格式")

        return self.load_from_dict(raw_data, base_path=config_path.parent.resolve())

    def load_from_dict(self, data: Dict[str, Any], base_path: Optional[Path] = None) -> DistpackConfig:
        """从字典加载配置

        Args:
            data: 配置数据字典
            base_path: 相对路径的基准路径

        Returns:
            DistpackConfig: 验证后的配置实例

        Raises:
            ConfigValidationError: 配置验证错误
        """
        data = _to_plain(data)
        if base_path:
            data = copy.deepcopy(data)
            self._resolve_relative_paths(data, base_path)

        try:
            return DistpackConfig.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError("配置验证失败", list(e.errors())) from e

    def load_default(self, work_dir: Union[str, Path]) -> DistpackConfig:
        """加载工作目录下的默认配置文件，不存在时使用内置默认值"""
        candidate = Path(work_dir) / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return self.load_from_file(candidate)
        return DistpackConfig()

    def save_to_file(self, config: DistpackConfig, output_path: Union[str, Path]) -> None:
        """保存配置到文件

        Raises:
            ConfigError: 保存错误
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                self.yaml.dump(config.to_dict(), f)
        except OSError as e:
            raise ConfigError(f"保存配置文件失败: {e}") from e

    def validate_file(self, config_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """验证配置文件并返回错误列表

        Returns:
            List[Dict]: 错误列表，空列表表示验证通过
        """
        try:
            self.load_from_file(config_path)
            return []
        except ConfigValidationError as e:
            return e.errors
        except ConfigError as e:
            return [{
                'loc': [],
                'msg': str(e),
                'type': 'config_error'
            }]

    def _resolve_relative_paths(self, data: Dict[str, Any], base_path: Path) -> None:
        """解析配置中的相对路径"""
        for field_path in self.PATH_FIELDS:
            self._resolve_field_path(data, field_path, base_path)

        assets = data.get('assets')
        if isinstance(assets, dict) and isinstance(assets.get('optional'), list):
            assets['optional'] = [
                str(base_path / item) if isinstance(item, str) and not Path(item).is_absolute() else item
                for item in assets['optional']
            ]

    def _resolve_field_path(self, data: Dict[str, Any], field_path: tuple, base_path: Path) -> None:
        """解析单个字段的相对路径"""
        current = data

        for key in field_path[:-1]:
            if key not in current or not isinstance(current[key], dict):
                return
            current = current[key]

        final_key = field_path[-1]
        path_value = current.get(final_key)
        if isinstance(path_value, str) and path_value and not Path(path_value).is_absolute():
            current[final_key] = str(base_path / path_value)


def _to_plain(obj: Any) -> Any:
    """把 ruamel 的 CommentedMap/CommentedSeq 转成普通 dict/list"""
    if isinstance(obj, dict):
        return {str(k): _to_plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_plain(item) for item in obj]
    if isinstance(obj, str):
        return str(obj)
    return obj


# 全局加载器实例
config_loader = ConfigLoader()


def load_config(config_path: Union[str, Path]) -> DistpackConfig:
    """便捷函数：加载配置文件"""
    return config_loader.load_from_file(config_path)


def validate_config(config_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """便捷函数：验证配置文件"""
    return config_loader.validate_file(config_path)


def save_config(config: DistpackConfig, output_path: Union[str, Path]) -> None:
    """便捷函数：保存配置文件"""
    config_loader.save_to_file(config, output_path)

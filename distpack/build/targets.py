"""
目标平台解析

决定本次运行要构建的目标平台列表，并提供宿主平台相关的判断。
优先级: TARGETS 环境变量 > 配置文件 targets > 宿主平台默认值。
"""

import os
import platform
import subprocess
from typing import Callable, List, Mapping, Optional, Sequence

from ..utils.logging import debug, info, LogStage
from ..utils.paths import is_safe_filename
from .build_context import InvalidTargetName, NoTargetsSpecified

TARGETS_ENV = "TARGETS"

# Linux 宿主上的内置目标列表
LINUX_DEFAULT_TARGETS = ("x86_64-unknown-linux-gnu", "aarch64-unknown-linux-gnu")


class HostFamily:
    """宿主平台族"""
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    OTHER = "other"


def detect_host_family(system: Optional[str] = None) -> str:
    """检测运行打包流程的宿主平台族"""
    system = (system or platform.system()).lower()
    if system == "linux":
        return HostFamily.LINUX
    if system == "darwin":
        return HostFamily.MACOS
    if system == "windows" or system.startswith(("cygwin", "msys", "mingw")):
        return HostFamily.WINDOWS
    return HostFamily.OTHER


def binary_suffix(target: str) -> str:
    """目标平台上可执行文件的后缀"""
    return ".exe" if "windows" in target.lower() else ""


def detect_host_target(runner: Callable = subprocess.run) -> Optional[str]:
    """通过 ``rustc -vV`` 的 host 行检测宿主目标三元组

    Returns:
        Optional[str]: 检测到的三元组，rustc 不可用或输出无法解析时为 None
    """
    try:
        result = runner(
            ["rustc", "-vV"],
            capture_output=True,
            text=True,
            timeout=60,
        )
    except (OSError, subprocess.SubprocessError) as e:
        debug(f"无法执行 rustc: {e}", stage=LogStage.INIT)
        return None

    if result.returncode != 0:
        debug(f"rustc -vV 返回 {result.returncode}", stage=LogStage.INIT)
        return None

    for line in result.stdout.splitlines():
        if line.startswith("host:"):
            host = line[len("host:"):].strip()
            return host or None
    return None


def default_targets(host_family: Optional[str] = None, runner: Callable = subprocess.run) -> List[str]:
    """宿主平台的默认目标列表

    Raises:
        NoTargetsSpecified: 非 Linux 宿主上无法检测 host 三元组
    """
    host_family = host_family or detect_host_family()
    if host_family == HostFamily.LINUX:
        return list(LINUX_DEFAULT_TARGETS)

    host = detect_host_target(runner)
    if not host:
        raise NoTargetsSpecified(
            f"未设置 {TARGETS_ENV}，且无法通过 rustc -vV 检测宿主目标平台"
        )
    return [host]


def parse_target_list(raw: str) -> List[str]:
    """按空白分割目标列表，保留顺序和重复项

    Raises:
        InvalidTargetName: 目标名称会成为暂存目录和归档文件名的一部分，不能包含路径分隔符
    """
    targets = raw.split()
    for target in targets:
        if not is_safe_filename(target):
            raise InvalidTargetName(f"{TARGETS_ENV} 中的目标平台名称不合法: {target!r}")
    return targets


def resolve_targets(
    configured: Sequence[str] = (),
    environ: Optional[Mapping[str, str]] = None,
    host_family: Optional[str] = None,
    runner: Callable = subprocess.run,
) -> List[str]:
    """解析目标平台列表

    Args:
        configured: 配置文件中的目标列表
        environ: 环境变量（默认 os.environ）
        host_family: 宿主平台族（默认自动检测）
        runner: 子进程执行函数，测试时可替换

    Returns:
        List[str]: 有序、非空的目标列表

    Raises:
        NoTargetsSpecified: 显式覆盖为空，或无法得到默认目标
        InvalidTargetName: 显式覆盖中含有不能作为文件名的目标
    """
    environ = os.environ if environ is None else environ

    override = environ.get(TARGETS_ENV)
    if override is not None:
        targets = parse_target_list(override)
        if not targets:
            raise NoTargetsSpecified(f"{TARGETS_ENV} 已设置但为空")
        info(f"使用 {TARGETS_ENV} 指定的目标: {' '.join(targets)}", stage=LogStage.INIT)
        return targets

    if configured:
        targets = list(configured)
        info(f"使用配置文件指定的目标: {' '.join(targets)}", stage=LogStage.INIT)
        return targets

    targets = default_targets(host_family, runner)
    info(f"使用宿主平台默认目标: {' '.join(targets)}", stage=LogStage.INIT)
    return targets

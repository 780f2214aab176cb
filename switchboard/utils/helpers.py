"""
工具函数集合 - switchboard 项目全局通用的辅助函数。

函数分类：
- 路径管理：ensure_dir, get_data_path
- 日志辅助：describe
"""

from pathlib import Path
from typing import Any


def ensure_dir(path: Path) -> Path:
    """
    确保目录存在，不存在则递归创建。

    参数:
        path: 目标目录路径

    返回:
        创建后的目录路径（原样返回）
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """获取 switchboard 数据目录（~/.switchboard）。自动创建不存在的目录。"""
    return ensure_dir(Path.home() / ".switchboard")


def describe(obj: Any) -> str:
    """
    生成用于日志输出的对象描述。

    优先使用对象的 name 属性，否则使用 "类名@内存地址"，
    保证同一类的不同实例在日志中可以区分。

    参数:
        obj: 任意对象（通常是订阅者或消息的 source/target）

    返回:
        简短的描述字符串
    """
    if obj is None:
        return "-"
    name = getattr(obj, "name", None)
    if isinstance(name, str) and name:
        return name
    return f"{type(obj).__name__}@{id(obj):#x}"

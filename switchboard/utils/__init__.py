"""
工具函数模块 - 提供 switchboard 项目全局通用的辅助函数。

本模块包含：
- ensure_dir：确保目录存在
- get_data_path：获取数据存储路径
- describe：生成日志中使用的对象描述
"""

from switchboard.utils.helpers import describe, ensure_dir, get_data_path

__all__ = ["describe", "ensure_dir", "get_data_path"]

"""
配置数据模型定义 (config/schema.py)
=================================
本模块使用 Pydantic 定义 switchboard 的完整配置结构。
所有配置项都有默认值，用户只需在 config.json 中覆盖需要修改的部分。

整体配置结构（树形）：
Config (根配置)
├── dispatcher    - 分发线程配置（轮询间隔、失败策略、线程名等）
└── logging       - 日志配置（CLI 输出的最低日志级别）

对于 Java 开发者：
- Pydantic 的 BaseModel 类似于 Java 的 POJO/Record，但自带字段验证和默认值
- BaseSettings 类似于 Spring 的 @ConfigurationProperties，额外支持从环境变量读取配置
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class DispatcherConfig(BaseModel):
    """
    分发线程配置。

    failure_policy 决定订阅者回调抛出异常时的处理方式：
    - isolate：记录异常日志，继续投递给下一个订阅者/下一条消息
    - fatal：记录异常日志后停止分发线程，不再处理任何消息
    """
    poll_interval_s: float = Field(default=0.005, gt=0)  # 队列空闲时的最长等待时间（秒），也是延迟删除/排空检查的节拍
    failure_policy: Literal["isolate", "fatal"] = "isolate"  # 订阅者回调异常的处理策略
    thread_name: str = "switchboard-dispatcher"  # 分发线程名称（便于日志和调试定位）
    daemon: bool = True  # 是否为守护线程（True 时进程退出不会等待分发线程）


class LoggingConfig(BaseModel):
    """日志配置。仅影响 CLI 安装的 stderr 输出，库本身不配置日志输出端。"""
    level: str = "INFO"  # 最低日志级别：DEBUG / INFO / WARNING / ERROR


class Config(BaseSettings):
    """
    switchboard 根配置类。

    继承自 Pydantic 的 BaseSettings，除了支持从 JSON 文件加载外，
    还支持从环境变量读取配置：
    - 环境变量前缀: SWITCHBOARD_
    - 嵌套分隔符: __ (双下划线)
    - 示例: SWITCHBOARD_DISPATCHER__FAILURE_POLICY=fatal 可覆盖 dispatcher.failure_policy
    - 环境变量优先于构造参数，也就优先于 config.json 中的值
    """
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)  # 分发线程配置
    logging: LoggingConfig = Field(default_factory=LoggingConfig)  # 日志配置

    model_config = ConfigDict(
        env_prefix="SWITCHBOARD_",  # 环境变量前缀
        env_nested_delimiter="__"  # 嵌套配置的分隔符
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        调整配置来源的优先级：环境变量 > 构造参数（即 config.json 的内容）。

        pydantic-settings 会逐层深度合并各来源的结果，因此
        SWITCHBOARD_DISPATCHER__FAILURE_POLICY 只覆盖这一个字段，
        文件中的其他字段保持不变。
        """
        return env_settings, init_settings, dotenv_settings, file_secret_settings

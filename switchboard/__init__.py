"""
switchboard - 进程内发布/订阅消息总线

模块概述：
    本文件是 switchboard 包的入口文件（__init__.py），定义了包的元信息。
    switchboard 让彼此独立开发的模块通过类型化消息通信，
    模块之间不需要持有对方的直接引用。

    整个框架的核心功能包括：
    - 任意线程投递消息（post 永不阻塞）
    - 按消息类别注册订阅（全部 / 通知 / 请求 / 数据）
    - 单一分发线程保证有序、单线程的消息投递
    - 基于 Terminate 消息的有序关闭握手
"""

# 版本号，遵循语义化版本规范（主版本.次版本.修订号）
__version__ = "0.1.0"

# 项目 logo 表情符号，用于 CLI 输出等场景的品牌标识
__logo__ = "🔀"

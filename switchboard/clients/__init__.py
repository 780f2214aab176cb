"""
客户端模块 - 接入消息总线的现成订阅者。

- BusClient：持有总线引用的订阅者基类（attach/detach/send 等辅助方法）
- ConsoleClient：把收到的消息打印到终端
- ResponderClient：用查找函数回答 Request 消息

【二开提示】
接入新的宿主框架（GUI、Web 服务等）时，继承 BusClient 并实现 deliver() 即可，
它对总线来说只是另一个订阅者。
"""

from switchboard.clients.base import BusClient
from switchboard.clients.console import ConsoleClient
from switchboard.clients.responder import ResponderClient

__all__ = ["BusClient", "ConsoleClient", "ResponderClient"]

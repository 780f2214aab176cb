"""
订阅者契约模块 - 定义接入消息总线的模块必须实现的接口。

【核心抽象方法】
- deliver(message): 接收总线分发的消息
- shutdown(): 总线收到 Terminate 消息时被调用，相当于模块的"析构函数"

两个回调都由总线唯一的分发线程同步调用：
- 订阅者无需为总线调用加锁（所有回调都来自同一个线程）
- 但不能假设回调来自投递消息的那个线程
- 回调中可以重入调用 post/register/unregister

【Java 开发者类比】
- Subscriber 相当于 Java 的 interface EventHandler { handle(); shutdown(); }
- FunctionSubscriber 相当于用 lambda 实现接口的匿名类
"""

from abc import ABC, abstractmethod
from typing import Any, Callable

from switchboard.bus.events import Message


class Subscriber(ABC):
    """消息订阅者抽象基类。"""

    @abstractmethod
    def deliver(self, message: Message) -> None:
        """
        处理总线分发过来的消息。

        挑选自己感兴趣的消息并做出响应即可。消息是只读的，不要修改它，
        同一个消息对象会依次传给所有匹配的订阅者。

        参数:
            message: 总线分发的消息
        """
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """
        任意模块向总线发送 Terminate 消息后调用。

        在这里做模块的清理工作。总线要等所有订阅者都注销后才会真正停止，
        因此实现里通常需要把自己从总线上注销。
        """
        pass


class FunctionSubscriber(Subscriber):
    """
    把普通函数适配为订阅者。

    参数:
        on_message: 消息回调
        on_shutdown: 关闭回调（可选）
        name: 用于日志的名称（可选，默认取回调函数名）
    """

    def __init__(
        self,
        on_message: Callable[[Message], Any],
        on_shutdown: Callable[[], Any] | None = None,
        name: str | None = None,
    ):
        self.on_message = on_message
        self.on_shutdown = on_shutdown
        self.name = name or getattr(on_message, "__name__", "function")

    def deliver(self, message: Message) -> None:
        self.on_message(message)

    def shutdown(self) -> None:
        if self.on_shutdown:
            self.on_shutdown()

    def __repr__(self) -> str:
        return f"FunctionSubscriber({self.name!r})"

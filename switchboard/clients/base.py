"""
客户端基类模块 - 持有总线引用的订阅者。

本模块提供了 BusClient 抽象基类：一个知道自己所连接总线的订阅者，
宿主框架适配器（GUI、CLI 等）和普通业务模块都可以继承它，
用 attach()/detach() 完成注册与注销，用 send()/notify()/request()/reply()
向总线投递消息。

【核心抽象方法】
- deliver(): 处理总线分发的消息（子类必须实现）

【默认行为】
- shutdown(): 从全部列表中注销自己，总线因此能够顺利完成排空并停止

【Java 开发者类比】
- BusClient 相当于实现了 EventHandler 接口、并持有 MessageBus 静态引用的抽象类
- attach()/detach() 相当于构造/析构时的 register/unregister 样板代码
"""

from abc import abstractmethod
from typing import Any

from loguru import logger

from switchboard.bus.events import Category, DataDelivery, ListenerMode, Message, Notification, Request
from switchboard.bus.queue import MessageBus
from switchboard.bus.registry import SUBSCRIBABLE
from switchboard.bus.subscriber import Subscriber


class BusClient(Subscriber):
    """
    总线客户端抽象基类。

    属性:
        name: 客户端名称，用于日志
        bus: 所连接的消息总线
    """

    name: str = "client"

    def __init__(self, bus: MessageBus, name: str | None = None):
        """
        参数:
            bus: 要连接的消息总线
            name: 可选的实例名称（默认使用类属性 name）
        """
        self.bus = bus
        if name:
            self.name = name

    def attach(self, *categories: Category, mode: ListenerMode = ListenerMode.TARGETED) -> None:
        """
        把自己注册到总线。

        参数:
            categories: 要注册的类别；为空时只注册 GENERIC（全部消息）
            mode: 订阅模式，默认 TARGETED

        异常:
            TypeError: 某个类别不是 Category
            ValueError: 某个类别不可订阅（TERMINATE）
        """
        categories = categories or (Category.GENERIC,)
        # 任一类别非法时不做任何注册
        for category in categories:
            if not isinstance(category, Category):
                raise TypeError(f"category must be a Category, got {type(category).__name__}")
            if category not in SUBSCRIBABLE:
                raise ValueError(f"Cannot register for {category.value} messages")
        for category in categories:
            self.bus.register(category, self, mode)
        logger.debug(f"{self.name} attached to {', '.join(c.value for c in categories)} ({mode.value})")

    def detach(self) -> None:
        """从全部列表中注销自己。"""
        self.bus.unregister_everywhere(self)

    def send(self, message: Message) -> bool:
        """投递任意消息。"""
        return self.bus.post(message)

    def notify(self, text: str, target: Any = None) -> bool:
        """以自己为 source 投递一条通知。"""
        return self.send(Notification(self, target, text=text))

    def request(self, meta: Any, target: Any = None) -> bool:
        """以自己为 source 投递一条数据请求。"""
        return self.send(Request(self, target, meta=meta))

    def reply(self, request: Request, data: Any) -> bool:
        """回复一条请求：数据定向发给请求方，并沿用请求的 meta。"""
        return self.send(DataDelivery.reply_to(request, self, data))

    @abstractmethod
    def deliver(self, message: Message) -> None:
        pass

    def shutdown(self) -> None:
        """默认关闭行为：注销自己。子类覆盖时应调用 super().shutdown()。"""
        logger.debug(f"{self.name} shutting down")
        self.detach()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

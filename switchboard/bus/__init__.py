"""
消息总线模块 - 实现模块之间的解耦通信。

本模块是 switchboard 的"中枢神经系统"：任意线程投递的消息进入分发队列，
由唯一的分发线程按顺序取出，再按类别和目标分发给注册了兴趣的订阅者。

消息流向：
  生产者模块 → post(Message) → 分发队列 → 分发线程 → 订阅者.deliver()
  任意模块 → post(Terminate) → 分发线程 → 所有订阅者.shutdown() → 排空 → 停止

【Java 开发者类比】
- MessageBus 类似于 Guava EventBus 的单线程异步版本
- Message 及其子类类似于不可变的 DTO / record
- Subscriber 类似于 Java 的监听器接口
"""

from switchboard.bus.dispatcher import Dispatcher, DispatcherState
from switchboard.bus.events import (
    Category,
    DataDelivery,
    ListenerMode,
    Message,
    Notification,
    Request,
    Terminate,
)
from switchboard.bus.queue import DispatchQueue, MessageBus
from switchboard.bus.registry import Subscription, SubscriptionRegistry
from switchboard.bus.subscriber import FunctionSubscriber, Subscriber

__all__ = [
    "MessageBus",
    "DispatchQueue",
    "Dispatcher",
    "DispatcherState",
    "SubscriptionRegistry",
    "Subscription",
    "Subscriber",
    "FunctionSubscriber",
    "Message",
    "Notification",
    "Request",
    "DataDelivery",
    "Terminate",
    "Category",
    "ListenerMode",
]

"""
消息类型定义模块 - 定义消息总线中传输的数据结构。

本模块定义了总线上流转的所有消息类型：
- Message：基础消息（类别 GENERIC）
- Notification：纯文本通知
- Request：数据请求（向所有监听模块索取数据）
- DataDelivery：数据投递（通常是对 Request 的回复）
- Terminate：终止消息，触发整个总线的有序关闭

每条消息都携带 source（发送者，必填）和 target（接收者，可选）。
target 为 None 的消息是"广播"消息，所有 TARGETED 模式的订阅者都能收到。

【Java 开发者类比】
- 使用 @dataclass(frozen=True)，等价于 Java 的 record 类（不可变值对象）
- Category 枚举替代了 instanceof 判断链：路由时直接按 category 查表

【设计要点】
- category 在构造时确定（init=False），调用方无法伪造类别
- eq=False：消息按对象身份比较，与订阅者的身份语义保持一致
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Category(Enum):
    """消息类别（路由标签）。"""

    GENERIC = "generic"
    NOTIFICATION = "notification"
    REQUEST = "request"
    DATA_DELIVERY = "data_delivery"
    TERMINATE = "terminate"


class ListenerMode(Enum):
    """
    订阅模式。

    - TARGETED：只接收广播消息（target 为空）或指定发给自己的消息
    - ANY：接收该类别下的所有消息，不论 target 是谁
    """

    TARGETED = "targeted"
    ANY = "any"


@dataclass(frozen=True, eq=False)
class Message:
    """
    基础消息 - 所有消息类型的公共父类。

    属性:
        source: 发送者句柄（通常是一个 Subscriber），不能为 None
        target: 接收者句柄，可选；为 None 表示广播
        category: 消息类别，由具体消息类型在构造时决定
    """

    source: Any                   # 发送者：必填
    target: Any = None            # 接收者：None 表示广播
    category: Category = field(default=Category.GENERIC, init=False)

    def __post_init__(self) -> None:
        if self.source is None:
            raise ValueError("You must specify a message source")

    @property
    def is_broadcast(self) -> bool:
        """没有指定 target 的消息可以投递给所有 TARGETED 订阅者。"""
        return self.target is None


@dataclass(frozen=True, eq=False)
class Notification(Message):
    """纯文本通知消息。"""

    category: Category = field(default=Category.NOTIFICATION, init=False)
    text: str = ""


@dataclass(frozen=True, eq=False)
class Request(Message):
    """
    数据请求消息。

    meta 描述了请求的数据（如查询条件、资源 ID 等）。请求会分发给所有
    监听模块，通常只有一个模块"认领"并以 DataDelivery 回复。
    """

    category: Category = field(default=Category.REQUEST, init=False)
    meta: Any = None


@dataclass(frozen=True, eq=False)
class DataDelivery(Message):
    """
    数据投递消息。

    属性:
        meta: 数据的元信息（回复请求时沿用请求的 meta）
        data: 实际投递的数据
    """

    category: Category = field(default=Category.DATA_DELIVERY, init=False)
    meta: Any = None
    data: Any = None

    @classmethod
    def reply_to(cls, request: Request, source: Any, data: Any) -> "DataDelivery":
        """
        构造对某个请求的回复。

        回复定向发给请求的发送者，并沿用请求的 meta，
        请求方据此把回复与自己的请求对应起来。

        参数:
            request: 被回复的请求消息
            source: 回复的发送者
            data: 回复的数据

        返回:
            定向发给 request.source 的 DataDelivery
        """
        return cls(source, request.source, meta=request.meta, data=data)


@dataclass(frozen=True, eq=False)
class Terminate(Message):
    """终止消息：分发线程收到后通知所有订阅者 shutdown()，随后进入排空阶段。"""

    category: Category = field(default=Category.TERMINATE, init=False)

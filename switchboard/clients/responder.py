"""
应答客户端 - 用一个查找函数回答 Request 消息。

请求会广播给所有监听 REQUEST 的模块，通常只有一个模块"认领"它。
ResponderClient 把"认领"规则交给 provider 函数：
provider 返回 None 表示不认领，否则返回值作为数据回复给请求方。
"""

from typing import Any, Callable

from loguru import logger

from switchboard.bus.events import Message, Request
from switchboard.bus.queue import MessageBus
from switchboard.clients.base import BusClient


class ResponderClient(BusClient):
    """
    数据应答客户端。

    属性:
        provider: 查找函数，接收请求的 meta，返回数据或 None
        answered: 已回复的请求数
    """

    name = "responder"

    def __init__(self, bus: MessageBus, provider: Callable[[Any], Any], name: str | None = None):
        super().__init__(bus, name)
        self.provider = provider
        self.answered = 0

    def deliver(self, message: Message) -> None:
        if not isinstance(message, Request) or message.source is self:
            return

        data = self.provider(message.meta)
        if data is None:
            logger.debug(f"{self.name} has no data for {message.meta!r}")
            return

        self.reply(message, data)
        self.answered += 1

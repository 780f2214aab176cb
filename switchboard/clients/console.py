"""
控制台客户端 - 把总线上的消息打印到终端。

使用 Rich 渲染每条消息：类别用不同颜色标记，
source/target 用客户端名称显示。CLI 的 demo 命令用它观察总线流量。
"""

from rich.console import Console
from rich.markup import escape

from switchboard.bus.events import Category, DataDelivery, Message, Notification, Request
from switchboard.bus.queue import MessageBus
from switchboard.clients.base import BusClient
from switchboard.utils.helpers import describe

# 各类别在终端中的显示颜色
CATEGORY_STYLES = {
    Category.GENERIC: "white",
    Category.NOTIFICATION: "cyan",
    Category.REQUEST: "yellow",
    Category.DATA_DELIVERY: "green",
}


class ConsoleClient(BusClient):
    """
    打印收到的每条消息。

    属性:
        console: Rich 控制台
        received: 收到的消息列表（按投递顺序）
        quiet: 为 True 时只记录不打印
    """

    name = "console"

    def __init__(self, bus: MessageBus, console: Console | None = None, name: str | None = None, quiet: bool = False):
        super().__init__(bus, name)
        self.console = console or Console()
        self.quiet = quiet
        self.received: list[Message] = []

    def deliver(self, message: Message) -> None:
        self.received.append(message)
        if not self.quiet:
            self.console.print(format_message(message), highlight=False)


def format_message(message: Message) -> str:
    """把消息格式化为一行带 Rich 标记的文本。"""
    style = CATEGORY_STYLES.get(message.category, "white")
    target = describe(message.target) if message.target is not None else "*"
    line = f"[{style}]{message.category.value:<13}[/{style}] {describe(message.source)} → {target}"

    if isinstance(message, Notification):
        line += f"  {escape(message.text)}"
    elif isinstance(message, Request):
        line += f"  meta={escape(repr(message.meta))}"
    elif isinstance(message, DataDelivery):
        line += f"  meta={escape(repr(message.meta))} data={escape(repr(message.data))}"
    return line

"""
CLI 命令模块 - switchboard 的所有命令行命令定义。

本模块使用 Typer 框架定义 switchboard 的 CLI 命令体系：
- onboard：初始化默认配置文件
- status：查看配置文件路径和生效的分发器配置
- demo：启动一条总线，运行一段脚本化的消息交换并有序关闭

技术栈：
- Typer：CLI 框架（基于 Click，支持类型注解自动生成帮助文档）
- Rich：终端美化输出（表格、彩色文本等）
"""

import sys
import time
from typing import Callable

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from switchboard import __logo__, __version__

# 创建 Typer 应用实例（CLI 根命令）
app = typer.Typer(
    name="switchboard",
    help=f"{__logo__} switchboard - In-process message bus",
    no_args_is_help=True,  # 无参数时显示帮助信息
)

console = Console()  # Rich 控制台实例，用于美化输出

# demo 命令中 library 模块能回答的请求
DEMO_CATALOG = {
    "greeting": "Hello from the library!",
    "answer": 42,
}


def version_callback(value: bool):
    """版本号回调：当用户传入 --version/-v 参数时，打印版本号并退出。"""
    if value:
        console.print(f"{__logo__} switchboard v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """switchboard CLI 根命令回调。处理全局选项（如 --version）。"""
    pass


def _setup_logging(enabled: bool, level: str) -> None:
    """按 --logs/--no-logs 开关 switchboard 的日志输出。"""
    logger.remove()
    if enabled:
        logger.add(sys.stderr, level=level)
        logger.enable("switchboard")
    else:
        logger.disable("switchboard")


def _wait_for(predicate: Callable[[], bool], timeout: float) -> bool:
    """轮询等待条件成立，超时返回 False。"""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() >= deadline:
            return False
        time.sleep(0.01)
    return True


# ============================================================================
# Onboard / Status
# ============================================================================


@app.command()
def onboard():
    """在 ~/.switchboard/ 下创建默认配置文件 config.json。"""
    from switchboard.config.loader import get_config_path, save_config
    from switchboard.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print(f"\n{__logo__} switchboard is ready!")
    console.print("\nNext steps:")
    console.print("  1. Tune the dispatcher in [cyan]~/.switchboard/config.json[/cyan]")
    console.print("  2. Try it: [cyan]switchboard demo --logs[/cyan]")


@app.command()
def status():
    """
    显示 switchboard 配置状态。

    展示内容：
    - 配置文件路径及是否存在
    - 生效的分发器配置（合并了配置文件和 SWITCHBOARD_ 环境变量）
    """
    from switchboard.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    console.print(f"{__logo__} switchboard Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[red]✗[/red]'}")

    table = Table(title="Dispatcher")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")

    table.add_row("poll interval", f"{config.dispatcher.poll_interval_s}s")
    table.add_row("failure policy", config.dispatcher.failure_policy)
    table.add_row("thread name", config.dispatcher.thread_name)
    table.add_row("daemon", "✓" if config.dispatcher.daemon else "✗")
    table.add_row("log level", config.logging.level)

    console.print(table)


# ============================================================================
# Demo
# ============================================================================


@app.command()
def demo(
    count: int = typer.Option(3, "--count", "-n", help="Number of notifications to post"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show switchboard runtime logs"),
    fatal: bool = typer.Option(False, "--fatal", help="Stop the dispatcher on the first subscriber failure (see --faulty)"),
    faulty: bool = typer.Option(False, "--faulty", help="Add a module that raises on every notification"),
    timeout: float = typer.Option(5.0, "--timeout", "-t", help="Seconds to wait for the bus to stop"),
):
    """
    运行一段脚本化的消息交换。

    参与者：
    - monitor：ANY 模式注册全部消息，把总线上的每条消息打印出来
    - library：应答 Request，数据来自 DEMO_CATALOG
    - reader：发送通知和请求，接收定向发给自己的 DataDelivery
    - faulty（仅 --faulty）：收到通知就抛异常，用来观察 failure_policy：
      默认记录异常后继续，--fatal 时分发线程停止、命令以 1 退出

    最后由 reader 投递 Terminate，所有客户端在 shutdown() 中注销自己，
    总线排空后停止。
    """
    from switchboard.bus.events import Category, ListenerMode
    from switchboard.bus.queue import MessageBus
    from switchboard.bus.subscriber import FunctionSubscriber
    from switchboard.clients.console import ConsoleClient
    from switchboard.clients.responder import ResponderClient
    from switchboard.config.loader import load_config

    config = load_config()
    if fatal:
        config.dispatcher = config.dispatcher.model_copy(update={"failure_policy": "fatal"})
    _setup_logging(logs, config.logging.level)

    bus = MessageBus(config)

    monitor = ConsoleClient(bus, console, name="monitor")
    monitor.attach(mode=ListenerMode.ANY)
    library = ResponderClient(bus, DEMO_CATALOG.get, name="library")
    library.attach(Category.REQUEST)
    reader = ConsoleClient(bus, console, name="reader", quiet=True)
    reader.attach(Category.DATA_DELIVERY)

    if faulty:

        def crash(message):
            raise RuntimeError(f"faulty module cannot handle {message.category.value}")

        broken = FunctionSubscriber(crash, on_shutdown=lambda: bus.unregister_everywhere(broken), name="faulty")
        bus.register_notifications(broken, ListenerMode.ANY)

    for i in range(count):
        reader.notify(f"hello #{i + 1}")
    reader.request("greeting")
    reader.request("unknown")

    # 等 library 的回复到达后再关闭，否则回复可能落在排空阶段之后
    if not _wait_for(lambda: bool(reader.received) or not bus.is_running, timeout):
        console.print("[yellow]No reply from library before timeout[/yellow]")

    bus.terminate(reader)
    if not bus.wait_stopped(timeout):
        console.print(f"[red]✗[/red] Bus did not stop within {timeout}s (state: {bus.state.value})")
        raise typer.Exit(1)

    if bus.failure is not None:
        console.print(f"[red]✗[/red] Dispatcher halted: {bus.failure}")
        raise typer.Exit(1)

    console.print(
        f"\n[green]✓[/green] {bus.dispatcher.processed} message(s) routed, "
        f"{bus.dispatcher.delivered} delivery call(s), "
        f"{len(reader.received)} reply(ies) for reader"
    )


if __name__ == "__main__":
    app()

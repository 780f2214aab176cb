"""
消息分发器模块 - 总线唯一的后台工作线程。

分发器持续从分发队列中取出消息，查询订阅注册表，
并在同一个线程中同步调用订阅者的回调。无论有多少生产者线程，
消息都按 post 的顺序（FIFO）逐条、单线程地投递。

状态机：
  RUNNING  ──(取到 Terminate 消息)──▶  DRAINING  ──(四个列表全空)──▶  STOPPED

- RUNNING → DRAINING：对每个已注册的不同订阅者调用一次 shutdown()，
  Terminate 消息本身不会投递给 deliver()
- DRAINING 期间继续取消息、继续执行延迟删除，
  这样订阅者在 shutdown() 中注销自己后，空列表检查最终会成功
- 进入 STOPPED 后线程退出，stopped 事件被置位

每个分发周期依次执行：
  1. 等待并取出至多一条消息（空闲时最多等待 poll_interval_s 秒）
  2. 执行延迟删除（活动列表唯一的结构修改点）
  3. 路由并投递取到的消息
  4. DRAINING 状态下检查列表是否全空

路由规则（消息 m，类别 c）：
  1. 总是投递给 GENERIC（"全部消息"）列表
  2. c 为 NOTIFICATION / REQUEST / DATA_DELIVERY 时，再投递给该类别的列表
  3. 同时注册在两个列表中的订阅者会收到两次（先全部列表，后类别列表）

【Java 开发者类比】
- Dispatcher 相当于 Runnable + 专用 Thread 的组合
- stopped 事件相当于 CountDownLatch(1)
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from switchboard.bus.events import Category, Message
from switchboard.bus.registry import SubscriptionRegistry
from switchboard.config.schema import DispatcherConfig
from switchboard.utils.helpers import describe

if TYPE_CHECKING:
    from switchboard.bus.queue import DispatchQueue
    from switchboard.bus.subscriber import Subscriber


class DispatcherState(Enum):
    """分发器状态。"""

    RUNNING = "running"
    DRAINING = "draining"  # 已收到 Terminate，等待所有订阅者注销
    STOPPED = "stopped"


class Dispatcher:
    """
    消息分发器 - 在专用线程中排空队列并投递消息。

    属性:
        queue: 分发队列（多生产者、单消费者）
        registry: 订阅注册表
        config: 分发线程配置
        state: 当前状态
        failure: fatal 策略下导致线程停止的异常（否则为 None）
        processed: 已路由的消息数（不含 Terminate）
        delivered: 已调用 deliver() 的次数
        stopped: 进入 STOPPED 状态时置位的事件
    """

    def __init__(
        self,
        queue: DispatchQueue,
        registry: SubscriptionRegistry,
        config: DispatcherConfig | None = None,
    ):
        self.queue = queue
        self.registry = registry
        self.config = config or DispatcherConfig()
        self.state = DispatcherState.RUNNING
        self.failure: Exception | None = None
        self.processed = 0
        self.delivered = 0
        self.stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def thread(self) -> threading.Thread | None:
        """分发线程（start() 之前为 None）。"""
        return self._thread

    def start(self) -> None:
        """启动分发线程。每个分发器只能启动一次。"""
        if self._thread is not None:
            raise RuntimeError("Dispatcher already started")

        self._thread = threading.Thread(
            target=self._run_loop,
            name=self.config.thread_name,
            daemon=self.config.daemon,
        )
        self._thread.start()
        logger.info(f"Dispatcher started ({self.config.thread_name}, failure policy: {self.config.failure_policy})")

    def join(self, timeout: float | None = None) -> bool:
        """等待分发器进入 STOPPED。返回是否在超时前停止。"""
        return self.stopped.wait(timeout)

    def _run_loop(self) -> None:
        """
        分发主循环（运行在分发线程中）。

        fatal 策略下订阅者回调的异常会从分发周期中传播出来，
        在这里被记录后终止线程，之后不再处理任何消息。
        """
        try:
            while self.state is not DispatcherState.STOPPED:
                self.run_once()
        except Exception as e:
            self.failure = e
            self.state = DispatcherState.STOPPED
            logger.opt(exception=e).error(f"Dispatcher halted by subscriber failure: {e}")
        else:
            logger.info(f"Dispatcher stopped after {self.processed} message(s)")
        finally:
            self.stopped.set()

    def run_once(self) -> Message | None:
        """
        执行一个分发周期。

        正常情况下只由分发线程调用；测试中可以在不启动线程的情况下
        直接调用，逐步驱动状态机。

        返回:
            本周期处理的消息（队列为空时返回 None）
        """
        message = self.queue.poll(timeout=self.config.poll_interval_s)
        self.registry.apply_removals()

        if message is not None:
            self._dispatch(message)

        if self.state is DispatcherState.DRAINING and self.registry.is_empty():
            self.state = DispatcherState.STOPPED
            logger.debug("All subscribers unregistered, leaving draining state")

        return message

    def _dispatch(self, message: Message) -> None:
        """按类别路由一条消息。"""
        if message.category is Category.TERMINATE:
            self._handle_terminate(message)
            return

        logger.debug(
            f"Dispatching {message.category.value} from {describe(message.source)} "
            f"to {describe(message.target) if message.target is not None else 'all'}"
        )
        self._deliver_to(Category.GENERIC, message)
        if message.category is not Category.GENERIC:
            self._deliver_to(message.category, message)
        self.processed += 1

    def _deliver_to(self, category: Category, message: Message) -> None:
        """按注册顺序遍历该类别列表的快照，把消息投递给匹配的订阅者。"""
        for entry in self.registry.entries(category):
            if entry.accepts(message):
                self.delivered += 1
                self._invoke(entry.subscriber, "deliver", message)

    def _handle_terminate(self, message: Message) -> None:
        """
        处理 Terminate 消息：进入 DRAINING 并通知所有订阅者关闭。

        每个订阅者只收到一次 shutdown()，即使它注册在多个列表中。
        排空阶段再次收到的 Terminate 会被丢弃。
        """
        if self.state is not DispatcherState.RUNNING:
            logger.warning(f"Ignoring terminate from {describe(message.source)}: dispatcher already {self.state.value}")
            return

        self.state = DispatcherState.DRAINING
        subscribers = self.registry.subscribers()
        logger.info(f"Terminate received from {describe(message.source)}, shutting down {len(subscribers)} subscriber(s)")
        for subscriber in subscribers:
            self._invoke(subscriber, "shutdown")

    def _invoke(self, subscriber: Subscriber, callback: str, *args) -> None:
        """
        调用订阅者回调，并按 failure_policy 处理异常。

        - isolate：记录异常（含堆栈）后继续
        - fatal：异常继续向上传播，由 _run_loop 终止分发线程
        """
        try:
            getattr(subscriber, callback)(*args)
        except Exception as e:
            if self.config.failure_policy == "fatal":
                raise
            logger.exception(f"Error in {describe(subscriber)}.{callback}(): {e}")

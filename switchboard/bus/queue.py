"""
消息队列模块 - 消息总线的核心实现。

本模块实现了：
- DispatchQueue：无界、线程安全的 FIFO 分发队列（多生产者、单消费者）
- MessageBus：总线门面，把消息、订阅注册表、分发队列和分发器组装在一起

消息流向：
  任意线程 → post() → 分发队列 → 分发线程 → 注册表查询 → subscriber.deliver()

【Java 开发者类比】
- queue.SimpleQueue 类似于 Java 的 ConcurrentLinkedQueue（无界、put 永不阻塞）
- MessageBus 类似于 Guava 的 AsyncEventBus，但投递线程固定为一个
- register_*/unregister_* 相当于 EventBus.register()/unregister()

【核心设计】
- post 只入队，从不同步投递，也从不阻塞
- register 立即追加到活动列表，下一个分发周期可见
- unregister 只做标记，真正的删除由分发线程在下一个周期完成（延迟删除）
- 总线在构造时即启动分发线程，没有单独的 start()；
  生命周期一直持续到 Terminate 消息处理完毕
"""

import queue

from loguru import logger

from switchboard.bus.dispatcher import Dispatcher, DispatcherState
from switchboard.bus.events import Category, ListenerMode, Message, Terminate
from switchboard.bus.registry import SUBSCRIBABLE, Subscription, SubscriptionRegistry
from switchboard.bus.subscriber import Subscriber
from switchboard.config.schema import Config, DispatcherConfig


class DispatchQueue:
    """
    分发队列 - 无界、线程安全的 FIFO。

    offer 永不阻塞，只在消息为 None 时失败；
    poll 在队列为空时返回 None（可选地先等待一小段时间）。
    """

    def __init__(self):
        self._queue: queue.SimpleQueue[Message] = queue.SimpleQueue()

    def offer(self, message: Message | None) -> bool:
        """入队一条消息。message 为 None 时返回 False。"""
        if message is None:
            return False
        self._queue.put_nowait(message)
        return True

    def poll(self, timeout: float | None = None) -> Message | None:
        """
        取出队首消息。

        参数:
            timeout: 队列为空时的最长等待秒数；None 或 0 表示不等待

        返回:
            队首消息，超时仍为空时返回 None
        """
        try:
            if not timeout:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


class MessageBus:
    """
    消息总线 - 模块之间交换类型化消息的中介。

    每个类别都有一组 register/unregister 方法：
    - *_all：所有消息（GENERIC 列表，任何类别的消息都会投递给它）
    - *_notifications：Notification 消息
    - *_requests：Request 消息
    - *_data：DataDelivery 消息

    注意：同时注册在"全部"列表和某个类别列表中的订阅者，
    对该类别的消息会收到两次。只想收到一次就只注册一个列表。

    属性:
        queue: 分发队列
        registry: 订阅注册表
        dispatcher: 分发器（构造时已启动）
    """

    def __init__(self, config: Config | DispatcherConfig | None = None):
        """
        创建总线并立即启动分发线程。

        参数:
            config: 根配置、分发器配置或 None（使用默认配置）
        """
        if isinstance(config, Config):
            config = config.dispatcher
        self.queue = DispatchQueue()
        self.registry = SubscriptionRegistry()
        self.dispatcher = Dispatcher(self.queue, self.registry, config)
        self.dispatcher.start()

    # ------------------------------------------------------------------
    # 投递
    # ------------------------------------------------------------------

    def post(self, message: Message | None) -> bool:
        """
        投递一条消息。

        只入队，立即返回；消息稍后由分发线程按 FIFO 顺序投递。
        分发器已停止时没有消费者，消息被直接丢弃（仍返回 True）。

        参数:
            message: 要投递的消息

        返回:
            是否接受（仅在 message 为 None 时返回 False）
        """
        if message is None:
            logger.warning("Rejected post: message must not be None")
            return False
        if self.dispatcher.state is DispatcherState.STOPPED:
            logger.debug(f"Dropped {message.category.value} posted after dispatcher stopped")
            return True
        self.queue.offer(message)
        return True

    def terminate(self, source: Subscriber) -> bool:
        """投递一条 Terminate 消息，开始整个总线的有序关闭。"""
        return self.post(Terminate(source))

    # ------------------------------------------------------------------
    # 注册 / 注销
    # ------------------------------------------------------------------

    def register(self, category: Category, subscriber: Subscriber, mode: ListenerMode) -> None:
        """
        为订阅者注册某个类别的消息。

        参数:
            category: GENERIC / NOTIFICATION / REQUEST / DATA_DELIVERY
            subscriber: 订阅者
            mode: TARGETED 或 ANY

        异常:
            ValueError: subscriber 或 mode 为 None，或 category 为 TERMINATE
            TypeError: category 或 mode 不是对应的枚举类型
        """
        if subscriber is None:
            raise ValueError("You must register a non-null subscriber")
        if mode is None:
            raise ValueError("You must register with a listener mode")
        if not isinstance(mode, ListenerMode):
            raise TypeError(f"mode must be a ListenerMode, got {type(mode).__name__}")
        if not isinstance(category, Category):
            raise TypeError(f"category must be a Category, got {type(category).__name__}")
        if category not in SUBSCRIBABLE:
            raise ValueError(f"Cannot register for {category.value} messages")
        self.registry.add(category, subscriber, mode)

    def unregister(self, category: Category, subscriber: Subscriber | None) -> None:
        """
        注销订阅者在某个类别中的所有注册（延迟删除）。

        subscriber 为 None 或从未注册时什么也不做。
        """
        if subscriber is None:
            return
        if category not in SUBSCRIBABLE:
            raise ValueError(f"Cannot unregister from {category!r}")
        self.registry.mark_for_removal(category, subscriber)

    def register_all(self, subscriber: Subscriber, mode: ListenerMode) -> None:
        """注册所有消息。"""
        self.register(Category.GENERIC, subscriber, mode)

    def unregister_all(self, subscriber: Subscriber | None) -> None:
        self.unregister(Category.GENERIC, subscriber)

    def register_notifications(self, subscriber: Subscriber, mode: ListenerMode) -> None:
        """注册 Notification 消息。"""
        self.register(Category.NOTIFICATION, subscriber, mode)

    def unregister_notifications(self, subscriber: Subscriber | None) -> None:
        self.unregister(Category.NOTIFICATION, subscriber)

    def register_requests(self, subscriber: Subscriber, mode: ListenerMode) -> None:
        """注册 Request 消息。"""
        self.register(Category.REQUEST, subscriber, mode)

    def unregister_requests(self, subscriber: Subscriber | None) -> None:
        self.unregister(Category.REQUEST, subscriber)

    def register_data(self, subscriber: Subscriber, mode: ListenerMode) -> None:
        """注册 DataDelivery 消息。"""
        self.register(Category.DATA_DELIVERY, subscriber, mode)

    def unregister_data(self, subscriber: Subscriber | None) -> None:
        self.unregister(Category.DATA_DELIVERY, subscriber)

    def unregister_everywhere(self, subscriber: Subscriber | None) -> None:
        """从全部四个列表中注销订阅者。"""
        for category in SUBSCRIBABLE:
            self.unregister(category, subscriber)

    # ------------------------------------------------------------------
    # 状态查询
    # ------------------------------------------------------------------

    def subscribers(self, category: Category | None = None) -> list[Subscription]:
        """
        活动订阅记录的快照，供检查和调试使用。

        参数:
            category: 指定类别；为 None 时返回全部四个列表（按类别顺序拼接）
        """
        if category is not None:
            return list(self.registry.entries(category))
        return [entry for c in SUBSCRIBABLE for entry in self.registry.entries(c)]

    @property
    def state(self) -> DispatcherState:
        return self.dispatcher.state

    @property
    def is_running(self) -> bool:
        """分发线程是否仍在处理消息（RUNNING 或 DRAINING）。"""
        return self.dispatcher.state is not DispatcherState.STOPPED

    @property
    def failure(self) -> Exception | None:
        """fatal 策略下导致分发线程停止的异常。"""
        return self.dispatcher.failure

    @property
    def pending(self) -> int:
        """等待分发的消息数量。"""
        return len(self.queue)

    def wait_stopped(self, timeout: float | None = None) -> bool:
        """
        阻塞等待分发器进入 STOPPED。

        参数:
            timeout: 最长等待秒数；None 表示一直等待

        返回:
            是否在超时前停止
        """
        return self.dispatcher.join(timeout)

    def __repr__(self) -> str:
        return f"MessageBus(state={self.state.value}, pending={self.pending}, subscribers={len(self.registry.subscribers())})"

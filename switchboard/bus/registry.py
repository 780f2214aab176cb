"""
订阅注册表模块 - 维护每个消息类别的订阅者列表。

注册表有四个并行的类别列表（GENERIC 即"全部消息"、NOTIFICATION、
REQUEST、DATA_DELIVERY），每个列表都配有一个"待删除"列表。

【核心同步约定：延迟删除】
- register 可以在任意线程调用，直接追加到活动列表
- unregister 可以在任意线程调用，但只把匹配的条目追加到待删除列表，
  从不直接修改活动列表
- 只有分发线程调用 apply_removals()，真正把条目从活动列表中移除

活动列表采用"写时复制"：每次结构修改都生成一个新列表再替换引用，
因此分发线程遍历的始终是一个不会被并发修改的快照，不需要在整个
分发周期内持锁。锁只在替换列表引用的一瞬间持有。

【Java 开发者类比】
- 活动列表相当于 CopyOnWriteArrayList
- 待删除列表相当于一个 ConcurrentLinkedQueue 旁路通道
"""

import threading
from dataclasses import dataclass

from loguru import logger

from switchboard.bus.events import Category, ListenerMode, Message
from switchboard.bus.subscriber import Subscriber
from switchboard.utils.helpers import describe

# 拥有订阅列表的类别（TERMINATE 不参与路由，没有列表）
SUBSCRIBABLE: tuple[Category, ...] = (
    Category.GENERIC,
    Category.NOTIFICATION,
    Category.REQUEST,
    Category.DATA_DELIVERY,
)


@dataclass(frozen=True, eq=False)
class Subscription:
    """
    一条订阅记录。

    同一个订阅者可以在同一列表中出现多次（重复注册会导致重复投递），
    因此记录本身按身份比较，延迟删除时精确删除被标记的那几条。
    """

    subscriber: Subscriber
    mode: ListenerMode

    def accepts(self, message: Message) -> bool:
        """ANY 模式全部接收；TARGETED 模式只接收广播或发给自己的消息。"""
        if self.mode is ListenerMode.ANY:
            return True
        return message.target is None or message.target is self.subscriber


class SubscriptionRegistry:
    """
    订阅注册表。

    属性:
        _live: 活动列表 {类别: [Subscription, ...]}（写时复制）
        _pending: 待删除列表 {类别: [Subscription, ...]}
        _lock: 仅在替换列表引用时持有的短锁
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._live: dict[Category, list[Subscription]] = {c: [] for c in SUBSCRIBABLE}
        self._pending: dict[Category, list[Subscription]] = {c: [] for c in SUBSCRIBABLE}

    def add(self, category: Category, subscriber: Subscriber, mode: ListenerMode) -> Subscription:
        """
        追加一条订阅记录，下一个分发周期即可生效。

        参数:
            category: 订阅的类别
            subscriber: 订阅者
            mode: 订阅模式

        返回:
            新建的订阅记录
        """
        entry = Subscription(subscriber, mode)
        with self._lock:
            self._live[category] = [*self._live[category], entry]
        logger.debug(f"Registered {describe(subscriber)} for {category.value} ({mode.value})")
        return entry

    def mark_for_removal(self, category: Category, subscriber: Subscriber) -> int:
        """
        把该类别中属于 subscriber 的所有条目标记为待删除。

        只影响指定类别的列表；订阅者在其他类别中的注册保持不变。
        重复标记或标记从未注册的订阅者都是无害的空操作。

        返回:
            本次标记的条目数
        """
        with self._lock:
            matches = [e for e in self._live[category] if e.subscriber is subscriber]
            if matches:
                self._pending[category] = [*self._pending[category], *matches]
        if matches:
            logger.debug(f"Marked {len(matches)} {category.value} subscription(s) of {describe(subscriber)} for removal")
        return len(matches)

    def apply_removals(self) -> int:
        """
        执行延迟删除。只能由分发线程调用。

        对每个类别：取出待删除列表并换上一个新的空列表，
        然后从活动列表中去掉被标记的条目。

        返回:
            实际删除的条目数
        """
        removed = 0
        with self._lock:
            for category in SUBSCRIBABLE:
                pending = self._pending[category]
                if not pending:
                    continue
                self._pending[category] = []
                doomed = {id(e) for e in pending}
                live = self._live[category]
                kept = [e for e in live if id(e) not in doomed]
                removed += len(live) - len(kept)
                self._live[category] = kept
        if removed:
            logger.debug(f"Removed {removed} subscription(s)")
        return removed

    def entries(self, category: Category) -> list[Subscription]:
        """返回该类别活动列表的当前快照（不要修改它）。"""
        return self._live[category]

    def subscribers(self) -> list[Subscriber]:
        """
        所有已注册的不同订阅者。

        按 GENERIC → NOTIFICATION → REQUEST → DATA_DELIVERY 的顺序、
        列表内按注册顺序去重，每个订阅者只出现一次。
        """
        seen: set[int] = set()
        result: list[Subscriber] = []
        for category in SUBSCRIBABLE:
            for entry in self._live[category]:
                if id(entry.subscriber) not in seen:
                    seen.add(id(entry.subscriber))
                    result.append(entry.subscriber)
        return result

    def is_empty(self) -> bool:
        """四个活动列表是否全部为空。"""
        return not any(self._live[c] for c in SUBSCRIBABLE)

    def pending_removals(self) -> int:
        """尚未执行的待删除条目数。"""
        return sum(len(self._pending[c]) for c in SUBSCRIBABLE)

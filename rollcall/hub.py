"""
观察者注册表 + 广播分发
=======================

ObserverRegistry:    当前打开的 WebSocket 连接集合 (连接时加入, 断开时移除)
BroadcastDispatcher: 事件只序列化一次, 逐个推送给注册表中的观察者

投递语义: 尽力而为的组播, 无确认 / 无排队 / 无重放。
  - 通道未打开的观察者直接跳过 (真正的移除交给断开回调)
  - 发送抛异常的观察者从注册表移除
  - 收件人在调用 broadcast() 时同步快照, 发送由一把 asyncio.Lock 串行化,
    因此每个观察者收到事件的顺序与提交顺序一致
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from starlette.websockets import WebSocketState

from .events import encode_event

logger = logging.getLogger(__name__)

# 避免直接引用 fastapi.WebSocket 类型, 用 Any 代替 (测试中可替换为假对象)
WebSocketConnection = Any


def is_open(ws: WebSocketConnection) -> bool:
    """通道是否仍处于打开状态"""
    return (
        getattr(ws, "client_state", None) == WebSocketState.CONNECTED
        and getattr(ws, "application_state", None) == WebSocketState.CONNECTED
    )


class ObserverRegistry:
    """当前连接的观察者 (保持加入顺序)"""

    def __init__(self):
        self._observers: Dict[int, WebSocketConnection] = {}

    def add(self, ws: WebSocketConnection):
        self._observers[id(ws)] = ws

    def discard(self, ws: WebSocketConnection):
        self._observers.pop(id(ws), None)

    def snapshot(self) -> List[WebSocketConnection]:
        """当前观察者的副本 (遍历期间注册表可被修改)"""
        return list(self._observers.values())

    def clear(self):
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)

    def __contains__(self, ws: object) -> bool:
        return id(ws) in self._observers


class BroadcastDispatcher:
    """
    事件广播器

    使用方式:
        dispatcher = BroadcastDispatcher(registry)
        sent = await dispatcher.broadcast(event)
    """

    def __init__(self, registry: ObserverRegistry):
        self._registry = registry
        self._lock: Optional[asyncio.Lock] = None

    @property
    def registry(self) -> ObserverRegistry:
        return self._registry

    @property
    def lock(self) -> asyncio.Lock:
        """发送锁 (首次使用时在当前事件循环中创建)"""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def reset(self):
        """清空观察者并丢弃发送锁 (测试 / 新会话)"""
        self._registry.clear()
        self._lock = None

    async def broadcast(self, event) -> int:
        """
        推送事件给所有观察者, 返回成功送达的数量。

        event 为 None 时什么也不做。
        """
        if event is None:
            return 0

        message = encode_event(event)
        targets = self._registry.snapshot()
        if not targets:
            return 0

        sent = 0
        async with self.lock:
            for ws in targets:
                if not is_open(ws):
                    continue
                try:
                    await ws.send_text(message)
                    sent += 1
                except Exception as e:
                    logger.warning(f"[Hub] 推送失败, 移除观察者: {e}")
                    self._registry.discard(ws)

        logger.debug(f"[Hub] {event.type} → {sent}/{len(targets)}")
        return sent

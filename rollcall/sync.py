"""
同步协议 — 新观察者握手 + 上行消息处理
======================================

握手顺序 (connect):
  1. 接受 WebSocket 升级
  2. 加入注册表 + 读取 Store 快照 (两步之间没有挂起点)
  3. 持广播锁把 init 快照单独发给该连接

第 2 步之后发起的广播都排在 init 之后; 之前已取收件人的广播不会发给它,
而那些修改已经包含在快照里。因此握手后观察者的视图等于连接时刻 (或之后)
的 Store 状态, 并按提交顺序收到之后的每一个事件。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Union

from .errors import MalformedMessage
from .events import InitEvent, encode_event
from .hub import BroadcastDispatcher, WebSocketConnection
from .store import ClassroomStore

logger = logging.getLogger(__name__)

KEEPALIVE_PING = "ping"
KEEPALIVE_PONG = "pong"


class SyncHandler:
    """观察者连接生命周期 (点对点发送, 不经过组播)"""

    def __init__(self, store: ClassroomStore, dispatcher: BroadcastDispatcher):
        self._store = store
        self._dispatcher = dispatcher

    async def connect(self, ws: WebSocketConnection):
        """接受连接并发送 init 快照"""
        await ws.accept()

        self._dispatcher.registry.add(ws)
        snapshot = InitEvent(classrooms=self._store.list())
        message = encode_event(snapshot)

        await self.send_direct(ws, message)

        logger.info(
            f"[WS] 观察者已连接, 快照 {len(snapshot.classrooms)} 个教室, "
            f"当前在线 {len(self._dispatcher.registry)}"
        )

    async def send_direct(self, ws: WebSocketConnection, message: str):
        """点对点发送 (与广播共用发送锁, 保证顺序)"""
        async with self._dispatcher.lock:
            await ws.send_text(message)

    def disconnect(self, ws: WebSocketConnection):
        self._dispatcher.registry.discard(ws)
        logger.info(f"[WS] 观察者已断开, 当前在线 {len(self._dispatcher.registry)}")

    def handle_message(self, raw: Union[str, bytes]) -> Optional[str]:
        """
        处理上行消息, 返回需要回复的文本 (没有则 None)。

        "ping" 回复 "pong" 作为保活; 其余内容按 JSON 解析, 目前没有副作用。
        无法解析时抛 MalformedMessage。
        """
        if raw == KEEPALIVE_PING:
            return KEEPALIVE_PONG

        try:
            data: Any = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedMessage(f"无法解析的消息: {e}") from e

        # 预留扩展点: 上行消息暂不修改状态
        logger.debug(f"[WS] 收到消息: {data!r}")
        return None

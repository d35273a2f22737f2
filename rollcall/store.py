"""
教室存储 — 全部教室的内存状态 (唯一数据源)
==========================================

职责:
  1. 维护 id → Classroom 映射 (保持插入顺序)
  2. 提供 get / list / put / delete / replace_all 基本操作
  3. 生成新的教室 id

不做任何业务校验 (path 唯一性由 gateway.MutationGateway 负责)。
进程退出即丢失, 持久化由浏览器 localStorage 承担。

并发: 只在 asyncio 事件循环中访问, 单次调用之间无挂起点, 不需要锁。
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from .models import Classroom

logger = logging.getLogger(__name__)


class ClassroomStore:
    """
    内存教室存储

    使用方式:
        store = ClassroomStore()
        store.put(classroom)
        classrooms = store.list()
    """

    def __init__(self):
        self._classrooms: Dict[str, Classroom] = {}

    @staticmethod
    def new_id() -> str:
        """生成新的教室 id (uuid4)"""
        return str(uuid.uuid4())

    # ================================================================
    # 查询
    # ================================================================

    def get(self, classroom_id: str) -> Optional[Classroom]:
        return self._classrooms.get(classroom_id)

    def list(self) -> List[Classroom]:
        """全部教室, 按插入顺序"""
        return list(self._classrooms.values())

    def find_by_path(self, path: str) -> Optional[Classroom]:
        """按 path 精确查找 (区分大小写)"""
        for classroom in self._classrooms.values():
            if classroom.path == path:
                return classroom
        return None

    def __len__(self) -> int:
        return len(self._classrooms)

    def __contains__(self, classroom_id: object) -> bool:
        return classroom_id in self._classrooms

    # ================================================================
    # 修改
    # ================================================================

    def put(self, classroom: Classroom):
        """插入或覆盖 (以 classroom.id 为键)"""
        self._classrooms[classroom.id] = classroom

    def delete(self, classroom_id: str) -> bool:
        """删除教室, 返回是否存在过"""
        return self._classrooms.pop(classroom_id, None) is not None

    def replace_all(self, classrooms: Iterable[Classroom]):
        """
        清空并整体替换。

        直接信任调用方提供的 id (sync 恢复的是服务器先前下发的 id);
        重复 id 时后者覆盖前者。
        """
        replacement: Dict[str, Classroom] = {}
        for classroom in classrooms:
            replacement[classroom.id] = classroom
        self._classrooms = replacement
        logger.info(f"[Store] 已整体替换, 共 {len(replacement)} 个教室")

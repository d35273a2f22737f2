"""
修改网关 — 所有对教室状态的写操作都经过这里
============================================

每个操作:
  1. 对照 ClassroomStore 校验不变量 (path 唯一 / id 存在 / 下标有效)
  2. 校验通过后提交到 Store
  3. 返回提交结果 + 需要广播的事件 (由调用方交给 BroadcastDispatcher)

校验失败抛出 errors 中的异常, 此时 Store 保持不变、不产生事件。
所有方法都是同步的, 在事件循环中一次执行完毕, 因此彼此之间天然原子。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .errors import ClassroomNotFound, PathConflict, StudentNotFound
from .events import (
    ClassroomAddedEvent,
    ClassroomDeletedEvent,
    ClassroomUpdatedEvent,
    InitEvent,
    StudentUpdatedEvent,
)
from .models import Classroom, roster_from_names
from .store import ClassroomStore

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    """一次已提交的修改: 返回给 HTTP 调用方的结果 + 待广播事件"""
    result: object
    event: Optional[object] = None


class MutationGateway:
    """
    教室写操作入口

    使用方式:
        gateway = MutationGateway(store)
        mutation = gateway.create("一年甲班", "1a", ["Bob"])
        await dispatcher.broadcast(mutation.event)
    """

    def __init__(self, store: ClassroomStore):
        self._store = store

    @property
    def store(self) -> ClassroomStore:
        return self._store

    def _require(self, classroom_id: str) -> Classroom:
        classroom = self._store.get(classroom_id)
        if classroom is None:
            raise ClassroomNotFound(classroom_id)
        return classroom

    def _check_path_free(self, path: str, exclude_id: Optional[str] = None):
        for classroom in self._store.list():
            if classroom.id != exclude_id and classroom.path == path:
                raise PathConflict(path)

    # ================================================================
    # 创建 / 更新 / 删除
    # ================================================================

    def create(self, name: str, path: str, students: List[str]) -> Mutation:
        """新建教室, 全部学生出勤清零"""
        self._check_path_free(path)

        classroom = Classroom(
            id=self._store.new_id(),
            name=name,
            path=path,
            students=roster_from_names(students),
        )
        self._store.put(classroom)
        logger.info(f"[Gateway] 新建教室 {classroom.id} ({path}), {len(students)} 名学生")
        return Mutation(classroom, ClassroomAddedEvent(classroom=classroom))

    def update(self, classroom_id: str, name: str, path: str,
               students: List[str]) -> Mutation:
        """
        整体替换 name / path / 名单。

        名单总是重建, 即使姓名完全相同, 所有学生的 present / left 也会被清零。
        path 为空或未改变时不做冲突检查。
        """
        current = self._require(classroom_id)

        # 空 path 不参与冲突检查, 多个教室可以同时为 ""
        if path and path != current.path:
            self._check_path_free(path, exclude_id=classroom_id)

        classroom = Classroom(
            id=classroom_id,
            name=name,
            path=path,
            students=roster_from_names(students),
        )
        self._store.put(classroom)
        logger.info(f"[Gateway] 更新教室 {classroom_id} ({path}), 出勤已重置")
        return Mutation(classroom, ClassroomUpdatedEvent(classroom=classroom))

    def delete(self, classroom_id: str) -> Mutation:
        self._require(classroom_id)
        self._store.delete(classroom_id)
        logger.info(f"[Gateway] 删除教室 {classroom_id}")
        return Mutation(classroom_id, ClassroomDeletedEvent(classroom_id=classroom_id))

    # ================================================================
    # 单个学生出勤
    # ================================================================

    def patch_student(self, classroom_id: str, student_index: Optional[int],
                      present: Optional[bool] = None,
                      left: Optional[bool] = None) -> Mutation:
        """
        切换单个学生的出勤状态。

        规则:
          - left 给出时优先: 写入 left, 并强制 present=True (离开意味着到过)
          - 否则 present 给出时写入 present; present=True 同时清除 left
          - present=False 不会自动清除 left

        未给出 student_index 时原样返回教室, 不产生事件。
        下标越界抛 StudentNotFound。
        """
        classroom = self._require(classroom_id)
        if student_index is None:
            return Mutation(classroom)

        if not 0 <= student_index < len(classroom.students):
            raise StudentNotFound(classroom_id, student_index)

        student = classroom.students[student_index]
        if left is not None:
            student.left = left
            student.present = True
        elif present is not None:
            student.present = present
            if present:
                student.left = False

        event = StudentUpdatedEvent(
            classroom_id=classroom_id,
            student_index=student_index,
            present=student.present,
            left=student.left,
        )
        logger.debug(
            f"[Gateway] 教室 {classroom_id} 学生 #{student_index}: "
            f"present={student.present}, left={student.left}"
        )
        return Mutation(classroom, event)

    # ================================================================
    # 整体同步
    # ================================================================

    def sync(self, classrooms: Iterable[Classroom]) -> Mutation:
        """
        以浏览器提供的整份状态替换服务器状态。

        信任边界: 不做 path 唯一性校验, 直接沿用客户端回传的 id。
        返回教室数量, 事件为全量 init (广播给所有观察者)。
        """
        self._store.replace_all(classrooms)
        snapshot = self._store.list()
        logger.info(f"[Gateway] 同步完成, 共 {len(snapshot)} 个教室")
        return Mutation(len(snapshot), InitEvent(classrooms=snapshot))

"""
共享数据模型 — 教室 / 学生 / HTTP 请求体
========================================

浏览器端与服务器之间传输的数据结构在此定义, 保证两端序列化一致。
线上字段名使用 camelCase (studentIndex), Python 属性使用 snake_case。
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Student(BaseModel):
    """单个学生的出勤状态 (按在名单中的位置寻址, 无独立 id)"""
    name: str
    present: bool = False               # 已到
    left: bool = False                  # 已离开 (隐含 present=True)


class Classroom(BaseModel):
    """
    教室: 出勤记录的顶层实体

    id 由服务器生成且不可变; path 全局唯一 (区分大小写)。
    """
    id: str
    name: str
    path: str
    students: List[Student] = Field(default_factory=list)


def roster_from_names(names: List[str]) -> List[Student]:
    """由姓名列表构建名单, 所有学生出勤状态清零"""
    return [Student(name=name, present=False, left=False) for name in names]


# ================================================================
# HTTP 请求体
# ================================================================

class ClassroomCreate(BaseModel):
    """POST /api/classrooms"""
    name: str
    path: str
    students: List[str] = Field(default_factory=list)


class ClassroomUpdate(ClassroomCreate):
    """PUT /api/classrooms/{id}: 整体替换可变字段"""


class StudentPatch(BaseModel):
    """PATCH /api/classrooms/{id}: 切换单个学生的出勤状态"""
    model_config = ConfigDict(populate_by_name=True)

    student_index: Optional[int] = Field(default=None, alias="studentIndex")
    present: Optional[bool] = None
    left: Optional[bool] = None         # 与 present 同时出现时优先


class SyncRequest(BaseModel):
    """POST /api/classrooms/sync: 浏览器 localStorage 恢复整份状态"""
    classrooms: List[Classroom] = Field(default_factory=list)

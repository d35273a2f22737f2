"""
推送事件 — WebSocket 下行消息
=============================

每种事件一个模型, 以 ``type`` 字段区分 (pydantic discriminated union)。
序列化统一走 :func:`encode_event`, 字段名按别名输出 (classroomId 等)。
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .models import Classroom


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InitEvent(_Event):
    """全量快照: 新连接握手 / sync 之后广播"""
    type: Literal["init"] = "init"
    classrooms: List[Classroom] = Field(default_factory=list)


class ClassroomAddedEvent(_Event):
    type: Literal["classroom_added"] = "classroom_added"
    classroom: Classroom


class ClassroomUpdatedEvent(_Event):
    type: Literal["classroom_updated"] = "classroom_updated"
    classroom: Classroom


class ClassroomDeletedEvent(_Event):
    type: Literal["classroom_deleted"] = "classroom_deleted"
    classroom_id: str = Field(alias="classroomId")


class StudentUpdatedEvent(_Event):
    """单个学生出勤变化, left 缺省为 False"""
    type: Literal["student_updated"] = "student_updated"
    classroom_id: str = Field(alias="classroomId")
    student_index: int = Field(alias="studentIndex")
    present: bool
    left: bool = False


ServerEvent = Annotated[
    Union[
        InitEvent,
        ClassroomAddedEvent,
        ClassroomUpdatedEvent,
        ClassroomDeletedEvent,
        StudentUpdatedEvent,
    ],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(ServerEvent)


def encode_event(event: _Event) -> str:
    """事件 → JSON 文本 (广播时只序列化一次)"""
    return event.model_dump_json(by_alias=True)


def decode_event(raw: Union[str, bytes]) -> _Event:
    """JSON 文本 → 对应的事件模型 (客户端 / 测试使用)"""
    return _event_adapter.validate_json(raw)

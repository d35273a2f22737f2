"""
rollcall — 教室出勤实时同步服务
===============================

内存中的教室状态 + WebSocket 推送。
仅依赖 fastapi / pydantic (uvicorn 用于运行)。
"""

from .errors import (
    ClassroomNotFound,
    MalformedMessage,
    PathConflict,
    RollcallError,
    StudentNotFound,
)
from .events import (
    ClassroomAddedEvent,
    ClassroomDeletedEvent,
    ClassroomUpdatedEvent,
    InitEvent,
    StudentUpdatedEvent,
    decode_event,
    encode_event,
)
from .gateway import MutationGateway
from .hub import BroadcastDispatcher, ObserverRegistry
from .models import Classroom, Student
from .store import ClassroomStore
from .sync import SyncHandler

__all__ = [
    "Classroom",
    "Student",
    "ClassroomStore",
    "MutationGateway",
    "ObserverRegistry",
    "BroadcastDispatcher",
    "SyncHandler",
    "InitEvent",
    "ClassroomAddedEvent",
    "ClassroomUpdatedEvent",
    "ClassroomDeletedEvent",
    "StudentUpdatedEvent",
    "encode_event",
    "decode_event",
    "RollcallError",
    "ClassroomNotFound",
    "StudentNotFound",
    "PathConflict",
    "MalformedMessage",
]

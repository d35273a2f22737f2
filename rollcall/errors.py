"""
错误类型 — Gateway / WebSocket 层抛出, 由 server.py 映射为 HTTP 响应
"""

from __future__ import annotations

PATH_IN_USE_MESSAGE = "路徑已被使用"


class RollcallError(Exception):
    """所有业务错误的基类 (单次请求内有效, 不影响进程)"""


class ClassroomNotFound(RollcallError):
    """教室 id 不存在 → 404"""

    def __init__(self, classroom_id: str, message: str = "classroom not found"):
        super().__init__(message)
        self.classroom_id = classroom_id
        self.message = message


class StudentNotFound(ClassroomNotFound):
    """studentIndex 越界 → 同样按 404 处理"""

    def __init__(self, classroom_id: str, student_index: int):
        super().__init__(classroom_id, "student not found")
        self.student_index = student_index


class PathConflict(RollcallError):
    """path 已被其他教室使用 → 400 {error}"""

    def __init__(self, path: str):
        super().__init__(PATH_IN_USE_MESSAGE)
        self.path = path
        self.message = PATH_IN_USE_MESSAGE


class MalformedMessage(RollcallError):
    """WebSocket 上行消息无法解析 (仅记录日志, 连接保持)"""

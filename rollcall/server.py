"""
rollcall Server — FastAPI 后端
==============================

职责:
  1. 教室 REST API (增 / 删 / 改 / 出勤切换 / 整体同步)
  2. WebSocket 实时推送 (/ws, 连接时下发全量快照, 之后推送每一次修改)
  3. 页面文件服务 (首页 / 管理页 / 教室页, 以及按教室 path 直达)

启动方式:
  - 独立模式: rollcall  (或 python -m rollcall.run_server)

状态只保存在内存中, 持久化由浏览器 localStorage 负责 (通过 /api/classrooms/sync 恢复)。
"""

from __future__ import annotations

import logging
import re
from typing import List

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from . import config
from .errors import ClassroomNotFound, MalformedMessage, PathConflict
from .gateway import MutationGateway
from .hub import BroadcastDispatcher, ObserverRegistry
from .models import (
    Classroom,
    ClassroomCreate,
    ClassroomUpdate,
    StudentPatch,
    SyncRequest,
)
from .store import ClassroomStore
from .sync import SyncHandler

logger = logging.getLogger(__name__)

# ================================================================
# FastAPI 应用
# ================================================================

app = FastAPI(
    title="rollcall",
    description="教室出勤实时同步 API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 全局状态 (单例, 进程生命周期)
_store = ClassroomStore()
_dispatcher = BroadcastDispatcher(ObserverRegistry())
_gateway = MutationGateway(_store)
_sync = SyncHandler(_store, _dispatcher)


def get_store() -> ClassroomStore:
    """获取教室存储单例"""
    return _store


def get_dispatcher() -> BroadcastDispatcher:
    """获取广播器单例"""
    return _dispatcher


def reset_state():
    """清空教室与观察者 (新会话 / 测试)"""
    _store.replace_all([])
    _dispatcher.reset()


# ================================================================
# 错误映射
# ================================================================

async def _not_found_handler(request: Request, exc: ClassroomNotFound):
    return JSONResponse(status_code=404, content={"error": exc.message})


async def _path_conflict_handler(request: Request, exc: PathConflict):
    return JSONResponse(status_code=400, content={"error": exc.message})


app.add_exception_handler(ClassroomNotFound, _not_found_handler)
app.add_exception_handler(PathConflict, _path_conflict_handler)


# ================================================================
# 教室 API
# ================================================================

@app.get("/api/classrooms", response_model=List[Classroom])
async def list_classrooms():
    """获取全部教室"""
    return _store.list()


@app.post("/api/classrooms", response_model=Classroom)
async def create_classroom(body: ClassroomCreate):
    """新建教室 (path 已被使用时 400)"""
    mutation = _gateway.create(body.name, body.path, body.students)
    await _dispatcher.broadcast(mutation.event)
    return mutation.result


@app.post("/api/classrooms/sync")
async def sync_classrooms(body: SyncRequest):
    """
    以浏览器 localStorage 中的数据整体替换服务器状态

    替换后向所有连接 (不只是发起方) 广播 init 快照。
    """
    mutation = _gateway.sync(body.classrooms)
    await _dispatcher.broadcast(mutation.event)
    return {"success": True, "count": mutation.result}


@app.delete("/api/classrooms/{classroom_id}")
async def delete_classroom(classroom_id: str):
    mutation = _gateway.delete(classroom_id)
    await _dispatcher.broadcast(mutation.event)
    return {"success": True}


@app.put("/api/classrooms/{classroom_id}", response_model=Classroom)
async def update_classroom(classroom_id: str, body: ClassroomUpdate):
    """整体更新教室 (名单重建, 出勤全部清零)"""
    mutation = _gateway.update(classroom_id, body.name, body.path, body.students)
    await _dispatcher.broadcast(mutation.event)
    return mutation.result


@app.patch("/api/classrooms/{classroom_id}", response_model=Classroom)
async def patch_student(classroom_id: str, body: StudentPatch):
    """切换单个学生的 present / left"""
    mutation = _gateway.patch_student(
        classroom_id, body.student_index, present=body.present, left=body.left
    )
    await _dispatcher.broadcast(mutation.event)
    return mutation.result


# ================================================================
# WebSocket 端点
# ================================================================

@app.websocket("/ws")
async def ws_observer(websocket: WebSocket):
    """
    观察者 WebSocket 连接

    连接后立即收到 init 快照, 之后接收每一次状态变化。
    上行消息目前只支持 "ping" 保活; 文本或二进制帧解析失败只记录日志, 不断开连接。
    """
    try:
        await _sync.connect(websocket)
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            data = message.get("text")
            if data is None:
                data = message.get("bytes")
            try:
                reply = _sync.handle_message(data)
            except MalformedMessage as e:
                logger.warning(f"[WS] {e}")
                continue
            if reply is not None:
                await _sync.send_direct(websocket, reply)
    except WebSocketDisconnect:
        pass
    finally:
        _sync.disconnect(websocket)


@app.api_route("/ws", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def ws_requires_upgrade():
    """非升级请求访问 /ws (任何方法)"""
    return PlainTextResponse("Expected WebSocket", status_code=400)


# ================================================================
# 页面
# ================================================================

_SLUG_PATTERN = re.compile(r"[a-zA-Z0-9\-_]+")


def _serve_page(filename: str, media_type: str = "text/html"):
    page = config.server.static_dir / filename
    if not page.is_file():
        return PlainTextResponse("File not found", status_code=404)
    return FileResponse(page, media_type=media_type)


@app.get("/")
@app.get("/index.html")
async def index_page():
    return _serve_page("index.html")


@app.get("/admin")
@app.get("/admin.html")
async def admin_page():
    return _serve_page("admin.html")


@app.get("/classroom.html")
async def classroom_page():
    return _serve_page("classroom.html")


@app.get("/rollcall.js")
async def page_script():
    return _serve_page("rollcall.js", media_type="application/javascript")


@app.get("/{path}")
async def classroom_by_path(path: str):
    """按教室 path 直达教室页 (必须在其他页面路由之后注册)"""
    if _SLUG_PATTERN.fullmatch(path) and _store.find_by_path(path) is not None:
        return _serve_page("classroom.html")
    return PlainTextResponse("Not Found", status_code=404)

"""WebSocket router for generation and upload progress."""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from karaoke.backend.services.task_manager import task_manager

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    """Push progress for the tasks this socket subscribes to, and nothing else."""
    await ws.accept()
    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict) or msg.get("type") != "subscribe":
                continue
            tid = msg.get("task_id")
            if not tid:
                continue
            task_manager.register_ws(ws, tid)
            # Send current status immediately
            task = task_manager.get_task(tid)
            if task:
                await ws.send_json({
                    "type": "status",
                    "task_id": tid,
                    "kind": task.kind,
                    "status": task.status.value,
                    "progress": task.progress,
                    "message": task.message,
                })
    except WebSocketDisconnect:
        pass
    finally:
        task_manager.unregister_ws(ws)

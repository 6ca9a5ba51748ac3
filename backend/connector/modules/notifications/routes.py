from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, Response, stream_with_context
import json
import time
from queue import Empty
from ... import lifecycle
from ...errors import Forbidden
from ...schemas.common import load_or_raise
from ...schemas.notification import AdminNotificationSchema, NotificationQuerySchema
from ...security import current_actor
from .bus import ADMIN_CHANNEL, subscribe, unsubscribe

bp = Blueprint("notifications", __name__, url_prefix="/admin/notifications")


@bp.before_request
def _require_admin():
    if not current_actor().is_admin:
        raise Forbidden("Admin access required")


@bp.get("")
def list_notifications():
    """Query params: unread (bool, default false), limit (default 50)."""
    args = load_or_raise(NotificationQuerySchema(), request.args.to_dict())
    limit = max(1, min(current_app.config.get("NOTIFICATION_LIST_LIMIT", 100), args["limit"]))
    rows = lifecycle.list_notifications(current_actor(), unread_only=args["unread"], limit=limit)
    return jsonify({"notifications": AdminNotificationSchema(many=True).dump(rows)})


@bp.patch("/<notif_id>/read")
def mark_read(notif_id: str):
    n = lifecycle.mark_notification_read(current_actor(), notif_id)
    return jsonify({"notification": AdminNotificationSchema().dump(n)})


@bp.get("/stream")
def stream_notifications():
    """Server-Sent Events stream of new admin notifications."""
    keepalive = int(current_app.config.get("NOTIFICATION_STREAM_KEEPALIVE", 15))
    q = subscribe(ADMIN_CHANNEL)

    def event_stream():
        try:
            # Initial comment to establish stream
            yield ": connected\n\n"
            while True:
                try:
                    evt = q.get(timeout=keepalive)
                except Empty:
                    yield "event: ping\n" + f"data: {json.dumps({'ts': int(time.time())})}\n\n"
                    continue
                yield "event: notification\n" + f"data: {json.dumps(evt)}\n\n"
        finally:
            unsubscribe(ADMIN_CHANNEL, q)

    headers = {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return Response(stream_with_context(event_stream()), headers=headers)

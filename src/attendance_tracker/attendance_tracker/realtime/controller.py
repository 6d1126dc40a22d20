from __future__ import annotations

import logging

from flask import request, session
from flask_socketio import SocketIO, emit

from ..container import Container
from ..users.session import identity_from_session

logger = logging.getLogger(__name__)


def register(socketio: SocketIO, container: Container) -> None:
    notifier = container.notifier

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("client connected: %s", request.sid)

    @socketio.on("join_admin")
    def on_join_admin(data=None):
        identity = identity_from_session(session)
        if identity is None or not identity.is_admin:
            emit("admin_join_denied", {"success": False, "message": "Admin access required."})
            return

        notifier.join_admin_group(request.sid, identity)
        emit(
            "admin_joined",
            {"success": True, "message": "Successfully joined admin room", "socket_id": request.sid},
        )

    @socketio.on("leave_admin")
    def on_leave_admin(data=None):
        notifier.leave_admin_group(request.sid)

    @socketio.on("join_employee")
    def on_join_employee(data=None):
        identity = identity_from_session(session)
        if identity is None:
            emit("employee_join_denied", {"success": False, "message": "Authentication required."})
            return

        subject_id = identity.subject_id
        requested = None
        if isinstance(data, dict):
            # Browser clients send "userId".
            requested = data.get("user_id") or data.get("userId")
        if requested and identity.is_admin:
            subject_id = str(requested)

        notifier.join_subject_group(request.sid, subject_id)
        emit(
            "employee_joined",
            {"success": True, "message": "Successfully connected", "socket_id": request.sid},
        )

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        notifier.disconnect(request.sid)
        logger.info("client disconnected: %s (%s)", request.sid, reason or "-")

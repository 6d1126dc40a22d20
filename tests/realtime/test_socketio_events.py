from __future__ import annotations

import pytest

from src.attendance_tracker.attendance_tracker.main import create_app


@pytest.fixture
def app():
    return create_app("config.testing")


def _login(client, user_id, name, role="employee"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["name"] = name
        sess["role"] = role
        sess["department"] = "IT"


def _socket(app, client):
    return app.extensions["socketio"].test_client(app, flask_test_client=client)


def _names(received):
    return [message["name"] for message in received]


def test_admin_receives_attendance_updates(app):
    admin_http = app.test_client()
    _login(admin_http, "u-admin", "Admin Demo", role="admin")
    admin_socket = _socket(app, admin_http)

    admin_socket.emit("join_admin")
    [joined] = admin_socket.get_received()
    assert joined["name"] == "admin_joined"
    assert joined["args"][0]["success"] is True

    employee_http = app.test_client()
    _login(employee_http, "u-1", "Alice Nguyen")
    assert employee_http.post("/api/attendance/checkin", json={}).status_code == 201

    [update] = admin_socket.get_received()
    assert update["name"] == "attendance_update"
    payload = update["args"][0]
    assert payload["kind"] == "checkin"
    assert payload["record"]["subject_id"] == "u-1"
    assert payload["subject"] == {"display_name": "Alice Nguyen", "subject_id": "u-1", "department": "IT"}


def test_employee_cannot_join_admin_room(app):
    http = app.test_client()
    _login(http, "u-1", "Alice Nguyen")
    socket = _socket(app, http)

    socket.emit("join_admin")
    assert _names(socket.get_received()) == ["admin_join_denied"]

    http.post("/api/attendance/checkin", json={})
    assert socket.get_received() == []


def test_employee_joins_own_group(app):
    http = app.test_client()
    _login(http, "u-1", "Alice Nguyen")
    socket = _socket(app, http)

    socket.emit("join_employee", {"user_id": "u-other"})

    assert _names(socket.get_received()) == ["employee_joined"]
    notifier = app.extensions["attendance_container"].notifier
    assert notifier.registry.members("employee_u-1")
    assert not notifier.registry.members("employee_u-other")


def test_anonymous_socket_is_refused(app):
    socket = _socket(app, app.test_client())

    socket.emit("join_employee")
    socket.emit("join_admin")

    assert _names(socket.get_received()) == ["employee_join_denied", "admin_join_denied"]


def test_leave_and_disconnect_stop_updates(app):
    admin_http = app.test_client()
    _login(admin_http, "u-admin", "Admin Demo", role="admin")
    socket = _socket(app, admin_http)
    socket.emit("join_admin")
    socket.get_received()

    socket.emit("leave_admin")
    notifier = app.extensions["attendance_container"].notifier
    assert notifier.admin_connections() == frozenset()

    socket.emit("join_admin")
    socket.disconnect()
    assert notifier.admin_connections() == frozenset()


def test_admin_can_watch_another_employee_by_user_id(app):
    http = app.test_client()
    _login(http, "u-admin", "Admin Demo", role="admin")
    socket = _socket(app, http)

    socket.emit("join_employee", {"userId": "u-7", "role": "admin"})

    assert _names(socket.get_received()) == ["employee_joined"]
    notifier = app.extensions["attendance_container"].notifier
    assert notifier.registry.members("employee_u-7")
    assert not notifier.registry.members("employee_u-admin")

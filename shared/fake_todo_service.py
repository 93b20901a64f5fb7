"""
In-process stand-in for the TODO service.

Implements the same REST + push contract as the real service so the suites
can run without external infrastructure:

    GET    /todos?offset=&limit=  -> 200 list (offset past the end -> [])
    GET    /todos/<id>            -> 200 record | 404
    POST   /todos                 -> 201 record | 400
    PUT    /todos/<id>            -> 200 record | 404 | 400
    DELETE /todos/<id>            -> 204 | 404 | 401 (Authorization required)

Every successful mutation is broadcast to all WebSocket clients connected to
the push endpoint as ``{"type": ..., "data": ...}``.

The REST side is a small Flask app served by werkzeug in a daemon thread;
the push side is a ``websockets`` synchronous server in another.
"""

from __future__ import annotations

import itertools
import json
import logging
import socket
import threading
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from websockets.exceptions import ConnectionClosed
from websockets.sync.server import ServerConnection, serve
from werkzeug.serving import make_server

from todo_client.models import MessageType

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 255
DEFAULT_AUTH_HEADER = "Basic YWRtaW46YWRtaW4="


# =====================================================================
# Storage
# =====================================================================


class TodoStore:
    """Thread-safe in-memory record store with server-assigned ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def list(self, offset: int = 0, limit: int | None = None) -> list[dict[str, Any]]:
        with self._lock:
            records = [dict(self._records[key]) for key in sorted(self._records)]
        end = None if limit is None else offset + limit
        return records[offset:end]

    def get(self, todo_id: int) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(todo_id)
            return dict(record) if record is not None else None

    def create(self, text: str, completed: bool) -> dict[str, Any]:
        with self._lock:
            record = {"id": next(self._ids), "text": text, "completed": completed}
            self._records[record["id"]] = record
            return dict(record)

    def update(self, todo_id: int, text: str, completed: bool) -> dict[str, Any] | None:
        with self._lock:
            if todo_id not in self._records:
                return None
            record = {"id": todo_id, "text": text, "completed": completed}
            self._records[todo_id] = record
            return dict(record)

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._records.pop(todo_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


# =====================================================================
# Push server
# =====================================================================


class PushServer:
    """WebSocket server that broadcasts change notifications to every client."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0, path: str = "/ws"):
        self.host = host
        self.path = path
        self._requested_port = port
        self._lock = threading.Lock()
        self._clients_changed = threading.Condition(self._lock)
        self._clients: set[ServerConnection] = set()
        self._server = None
        self._thread: threading.Thread | None = None
        self._received: list[str | bytes] = []
        self.port: int | None = None

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}{self.path}"

    @property
    def received(self) -> list[str | bytes]:
        """Snapshot of the messages clients have sent, in arrival order."""
        with self._lock:
            return list(self._received)

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def wait_for_clients(self, count: int, timeout: float = 5) -> bool:
        """
        Block until exactly ``count`` clients are registered.

        A client's ``connect`` can return before the server handler has
        registered it; callers that broadcast right after connecting wait
        here first.
        """
        with self._clients_changed:
            return self._clients_changed.wait_for(lambda: len(self._clients) == count, timeout)

    def start(self) -> "PushServer":
        self._server = serve(self._handle, self.host, self._requested_port)
        self.port = self._server.socket.getsockname()[1]
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="fake-push-server", daemon=True
        )
        self._thread.start()
        logger.info("Fake push server listening on %s", self.url)
        return self

    def stop(self) -> None:
        self.close_clients(1001, "Server shutdown")
        if self._server is not None:
            self._server.shutdown()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def _handle(self, connection: ServerConnection) -> None:
        if connection.request is None or connection.request.path != self.path:
            connection.close(1008, "Unknown path")
            return
        with self._lock:
            self._clients.add(connection)
            self._clients_changed.notify_all()
        try:
            for message in connection:
                with self._lock:
                    self._received.append(message)
        except ConnectionClosed as exc:
            logger.debug("Push client disconnected: %s", exc)
        finally:
            with self._lock:
                self._clients.discard(connection)
                self._clients_changed.notify_all()

    def _snapshot(self) -> list[ServerConnection]:
        with self._lock:
            return list(self._clients)

    def broadcast(self, message: str | bytes) -> int:
        """Send ``message`` to every connected client; return how many received it."""
        sent = 0
        for connection in self._snapshot():
            try:
                connection.send(message)
                sent += 1
            except ConnectionClosed:
                logger.debug("Skipping closed push client")
        return sent

    def broadcast_event(self, message_type: MessageType, data: dict[str, Any]) -> int:
        return self.broadcast(json.dumps({"type": message_type.value, "data": data}))

    def close_clients(self, code: int = 1000, reason: str = "") -> None:
        """Close every client connection with a close frame."""
        for connection in self._snapshot():
            connection.close(code, reason)

    def drop_clients(self) -> None:
        """Tear down every client's TCP connection without a close frame."""
        for connection in self._snapshot():
            try:
                connection.socket.shutdown(socket.SHUT_RDWR)
            except OSError as exc:
                logger.debug("Socket already gone: %s", exc)


# =====================================================================
# REST app
# =====================================================================

todos_bp = Blueprint("todos", __name__)


def _validate_todo_body(data: Any) -> str | None:
    """
    Validate a create/update body.

    Returns:
        An error message, or None if the body is valid.
    """
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        return "'text' is required"
    if len(text) > MAX_TEXT_LENGTH:
        return f"'text' must be {MAX_TEXT_LENGTH} characters or less"
    if not isinstance(data.get("completed"), bool):
        return "'completed' is required and must be a boolean"
    return None


def _store() -> TodoStore:
    return current_app.config["TODO_STORE"]


def _push() -> PushServer | None:
    return current_app.config.get("PUSH_SERVER")


def _notify(message_type: MessageType, data: dict[str, Any]) -> None:
    push_server = _push()
    if push_server is not None:
        push_server.broadcast_event(message_type, data)


@todos_bp.route("/todos", methods=["GET"])
def list_todos() -> tuple[Response, int]:
    offset = request.args.get("offset", default=0, type=int)
    limit = request.args.get("limit", default=None, type=int)
    if offset < 0 or (limit is not None and limit < 0):
        return jsonify({"error": "offset and limit must be non-negative"}), 400
    return jsonify(_store().list(offset, limit)), 200


@todos_bp.route("/todos/<int:todo_id>", methods=["GET"])
def get_todo(todo_id: int) -> tuple[Response, int]:
    record = _store().get(todo_id)
    if record is None:
        return jsonify({"error": "Todo not found"}), 404
    return jsonify(record), 200


@todos_bp.route("/todos", methods=["POST"])
def create_todo() -> tuple[Response, int]:
    data = request.get_json(silent=True)
    error = _validate_todo_body(data)
    if error:
        return jsonify({"error": error}), 400
    record = _store().create(data["text"], data["completed"])
    _notify(MessageType.NEW_TODO, record)
    return jsonify(record), 201


@todos_bp.route("/todos/<int:todo_id>", methods=["PUT"])
def update_todo(todo_id: int) -> tuple[Response, int]:
    if _store().get(todo_id) is None:
        return jsonify({"error": "Todo not found"}), 404
    data = request.get_json(silent=True)
    error = _validate_todo_body(data)
    if error:
        return jsonify({"error": error}), 400
    record = _store().update(todo_id, data["text"], data["completed"])
    if record is None:
        return jsonify({"error": "Todo not found"}), 404
    _notify(MessageType.UPDATE_TODO, record)
    return jsonify(record), 200


@todos_bp.route("/todos/<int:todo_id>", methods=["DELETE"])
def delete_todo(todo_id: int) -> tuple[Response, int]:
    if request.headers.get("Authorization") != current_app.config["AUTH_HEADER"]:
        return jsonify({"error": "Unauthorized"}), 401
    if not _store().delete(todo_id):
        return jsonify({"error": "Todo not found"}), 404
    _notify(MessageType.DELETE_TODO, {"id": todo_id})
    return Response(status=204), 204


def create_app(
    store: TodoStore,
    push_server: PushServer | None = None,
    auth_header: str = DEFAULT_AUTH_HEADER,
) -> Flask:
    """Create the fake REST app bound to ``store`` and ``push_server``."""
    app = Flask(__name__)
    app.config.update(
        TESTING=True,
        TODO_STORE=store,
        PUSH_SERVER=push_server,
        AUTH_HEADER=auth_header,
    )
    app.register_blueprint(todos_bp)
    return app


# =====================================================================
# Whole service
# =====================================================================


class FakeTodoService:
    """
    REST app and push server started together on free local ports.

    Example:
        service = FakeTodoService().start()
        ...  # use service.base_url / service.ws_url
        service.stop()
    """

    def __init__(self, host: str = "127.0.0.1", auth_header: str = DEFAULT_AUTH_HEADER):
        self.host = host
        self.auth_header = auth_header
        self.store = TodoStore()
        self.push_server = PushServer(host=host)
        self.app = create_app(self.store, self.push_server, auth_header)
        self._http_server = None
        self._http_thread: threading.Thread | None = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self._http_server.server_port}"

    @property
    def ws_url(self) -> str:
        return self.push_server.url

    def start(self) -> "FakeTodoService":
        self.push_server.start()
        self._http_server = make_server(self.host, 0, self.app, threaded=True)
        self._http_thread = threading.Thread(
            target=self._http_server.serve_forever, name="fake-todo-http", daemon=True
        )
        self._http_thread.start()
        logger.info("Fake TODO service listening on %s", self.base_url)
        return self

    def stop(self) -> None:
        if self._http_server is not None:
            self._http_server.shutdown()
        if self._http_thread is not None:
            self._http_thread.join(timeout=5)
        self.push_server.stop()

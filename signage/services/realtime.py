import asyncio
import enum
import json
import logging
from typing import Any, Callable, Protocol

from fastapi import Request, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from fastapi.websockets import WebSocketState

from signage.errors import Unauthenticated
from signage.services.auth import authenticate_token

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008
# Seconds a fresh channel may wait before its first valid register.
DEFAULT_REGISTER_TIMEOUT = 60.0


class Channel(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def send(self, message: dict[str, Any]) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class ConnectionRegistry:
    """Live channel per display id; at most one entry per id."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}
        self._lock = asyncio.Lock()

    async def register(self, display_id: str, channel: Channel) -> Channel | None:
        async with self._lock:
            previous = self._channels.get(display_id)
            self._channels[display_id] = channel
        if previous is not None and previous is not channel:
            logger.info("Display %s channel superseded by a newer connection", display_id)
            return previous
        return None

    async def unregister(self, display_id: str, channel: Channel | None = None) -> bool:
        async with self._lock:
            current = self._channels.get(display_id)
            if current is None:
                return False
            # A late close from a superseded channel must not evict its replacement.
            if channel is not None and current is not channel:
                return False
            del self._channels[display_id]
        return True

    async def lookup(self, display_id: str) -> Channel | None:
        async with self._lock:
            return self._channels.get(display_id)

    def display_ids(self) -> list[str]:
        return list(self._channels)

    def __contains__(self, display_id: object) -> bool:
        return display_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)


def refresh_message(display_id: str) -> dict[str, Any]:
    return {"type": "refresh", "displayId": display_id}


class NotificationDispatcher:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def notify_refresh(self, display_id: str) -> bool:
        channel = await self.registry.lookup(display_id)
        if channel is None or not channel.is_open:
            logger.debug("No live channel for display %s; refresh left to polling", display_id)
            return False
        try:
            await channel.send(refresh_message(display_id))
        except Exception:
            logger.warning("Refresh to display %s failed; dropping stale channel", display_id, exc_info=True)
            await self.registry.unregister(display_id, channel)
            return False
        logger.info("Refresh delivered to display %s", display_id)
        return True


class RegisterMessage(BaseModel):
    type: str
    displayId: str
    accessToken: str


class ChannelState(str, enum.Enum):
    CONNECTING = "connecting"
    AWAITING_REGISTRATION = "awaiting_registration"
    REGISTERED = "registered"
    CLOSED = "closed"


class DisplayChannel:
    """One websocket connection from a player.

    Walks CONNECTING -> AWAITING_REGISTRATION -> REGISTERED, and ends in
    CLOSED from any state. Only a registered channel is reachable from the
    registry.
    """

    def __init__(
        self,
        websocket: WebSocket,
        registry: ConnectionRegistry,
        session_factory: Callable[[], Session],
        register_timeout: float | None = DEFAULT_REGISTER_TIMEOUT,
    ) -> None:
        self.websocket = websocket
        self.registry = registry
        self.session_factory = session_factory
        self.register_timeout = register_timeout
        self.state = ChannelState.CONNECTING
        self.display_id: str | None = None

    @property
    def is_open(self) -> bool:
        return (
            self.state is not ChannelState.CLOSED
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: dict[str, Any]) -> None:
        await self.websocket.send_text(json.dumps(message))

    async def accept(self) -> None:
        await self.websocket.accept()
        self.state = ChannelState.AWAITING_REGISTRATION

    async def _send_error(self, message: str) -> None:
        await self.send({"type": "error", "message": message})

    def _authenticate(self, token: str) -> str:
        db = self.session_factory()
        try:
            return str(authenticate_token(db, token).id)
        finally:
            db.close()

    async def handle_text(self, raw: str) -> None:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            await self._send_error("Invalid message format")
            return
        if not isinstance(data, dict):
            await self._send_error("Invalid message format")
            return

        register = None
        if data.get("type") == "register":
            try:
                register = RegisterMessage.model_validate(data)
            except PydanticValidationError:
                register = None
            if register is not None and not (register.displayId and register.accessToken):
                register = None

        if register is not None:
            await self._handle_register(register)
        elif self.state is not ChannelState.REGISTERED:
            await self._send_error("Not authenticated - send register message first")

    async def _handle_register(self, message: RegisterMessage) -> None:
        try:
            resolved_id = await run_in_threadpool(self._authenticate, message.accessToken)
        except Unauthenticated:
            resolved_id = None
        if resolved_id is None or resolved_id != message.displayId:
            logger.info("Rejected channel registration for display %s", message.displayId)
            await self._send_error("Invalid credentials - unauthorized")
            await self.close(POLICY_VIOLATION)
            return

        if self.display_id is not None and self.display_id != resolved_id:
            await self.registry.unregister(self.display_id, self)
        await self.registry.register(resolved_id, self)
        self.display_id = resolved_id
        self.state = ChannelState.REGISTERED
        logger.info("Display %s registered for live updates", resolved_id)
        await self.send({"type": "registered", "displayId": resolved_id})

    async def close(self, code: int = 1000) -> None:
        if self.state is ChannelState.CLOSED:
            return
        was_open = self.is_open
        await self.release()
        if was_open:
            await self.websocket.close(code=code)

    async def release(self) -> None:
        self.state = ChannelState.CLOSED
        if self.display_id is not None:
            removed = await self.registry.unregister(self.display_id, self)
            if removed:
                logger.info("Display %s disconnected", self.display_id)

    async def receive_text(self) -> str:
        message = await self.websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
        if message.get("text") is not None:
            return message["text"]
        return (message.get("bytes") or b"").decode("utf-8", errors="replace")

    async def _next_text(self, deadline: float | None) -> str | None:
        if self.state is ChannelState.REGISTERED or deadline is None:
            return await self.receive_text()
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            return None
        try:
            return await asyncio.wait_for(self.receive_text(), timeout=remaining)
        except asyncio.TimeoutError:
            return None

    async def serve(self) -> None:
        await self.accept()
        deadline = None
        if self.register_timeout is not None:
            deadline = asyncio.get_running_loop().time() + self.register_timeout
        try:
            while self.state is not ChannelState.CLOSED:
                raw = await self._next_text(deadline)
                if raw is None:
                    logger.info("Channel closed: no valid register within %.1fs", self.register_timeout)
                    await self._send_error("Registration timeout")
                    await self.close(POLICY_VIOLATION)
                    break
                await self.handle_text(raw)
        finally:
            await self.release()


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher

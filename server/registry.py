from __future__ import annotations

import asyncio
import logging
import random
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from monopoly_deal import GameConfig, GameState, MatchPhase, PlayerState, create_game
from monopoly_deal.exceptions import LookupFailure, MonopolyDealError
from monopoly_deal.snapshot import serialize_snapshot

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6
# Outbound messages buffered per client; the oldest is dropped when full.
CLIENT_QUEUE_SIZE = 64
CHAT_MAX_LENGTH = 500


class RoomNotFoundError(LookupFailure):
    """Room does not exist."""


class AccessDenied(MonopolyDealError):
    """Caller may not act in this room."""


class InvalidTokenError(AccessDenied):
    """Token does not belong to a seat in this room."""


class NotHostError(AccessDenied):
    """Only the host may do this."""


class Room:
    """Owns a single GameState and serializes every change to it.

    Responsibilities:
    - Hold the per-room lock around each engine call
    - Map each seat's secret token to its player id
    - Push a fresh per-viewer snapshot to subscribed WebSocket clients
    """

    def __init__(self, code: str, game: GameState):
        self.code = code
        self.game = game
        self._lock = asyncio.Lock()
        self._tokens: Dict[str, str] = {}
        # each client gets a queue of outbound messages, keyed to its viewer id
        self._clients: Dict[asyncio.Queue, Optional[str]] = {}

    @property
    def host_id(self) -> Optional[str]:
        return self.game.players[0].player_id if self.game.players else None

    @property
    def is_empty(self) -> bool:
        return not self.game.players

    @property
    def client_count(self) -> int:
        return len(self._clients)

    # ---- Seat tokens ----

    def issue_token(self, player_id: str) -> str:
        token = secrets.token_urlsafe(16)
        self._tokens[token] = player_id
        return token

    def revoke(self, player_id: str) -> None:
        for token in [t for t, pid in self._tokens.items() if pid == player_id]:
            del self._tokens[token]

    def player_for(self, token: Optional[str]) -> PlayerState:
        """Resolve a token to its seat, or raise InvalidTokenError."""
        player_id = self._tokens.get(token) if token else None
        if player_id is None:
            raise InvalidTokenError("Invalid player token for this room")
        return self.game.get_player(player_id)

    # ---- Engine access ----

    async def apply(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run one engine operation under the room lock, then broadcast."""
        async with self._lock:
            result = fn(*args)
            await self._broadcast()
        return result

    async def read(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a read-only query under the room lock."""
        async with self._lock:
            return fn(*args)

    async def snapshot(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        return await self.read(serialize_snapshot, self.game, viewer_id)

    # ---- Subscribers ----

    async def subscribe(self, viewer_id: Optional[str] = None) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=CLIENT_QUEUE_SIZE)
        async with self._lock:
            self._clients[queue] = viewer_id
            _push(queue, self._message(viewer_id))
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        async with self._lock:
            self._clients.pop(queue, None)

    async def chat(self, player: PlayerState, text: str) -> Dict[str, Any]:
        """Stamp a chat line from a seated player and fan it out to every client."""
        message = {
            "type": "chat",
            "id": uuid.uuid4().hex,
            "room_code": self.code,
            "player_id": player.player_id,
            "player_name": player.name,
            "message": text[:CHAT_MAX_LENGTH],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        async with self._lock:
            for queue in list(self._clients):
                _push(queue, message)
        return message

    def _message(self, viewer_id: Optional[str]) -> Dict[str, Any]:
        return {
            "type": "snapshot",
            "room_code": self.code,
            "snapshot": serialize_snapshot(self.game, viewer_id),
        }

    async def _broadcast(self) -> None:
        for queue, viewer_id in list(self._clients.items()):
            _push(queue, self._message(viewer_id))


def _push(queue: asyncio.Queue, message: Dict[str, Any]) -> None:
    try:
        queue.put_nowait(message)
    except asyncio.QueueFull:
        # Slow client: drop its oldest message rather than block the room
        queue.get_nowait()
        queue.put_nowait(message)


class RoomRegistry:
    """In-memory registry of open rooms."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()
        self._config = config
        self._rng = rng or random.Random()

    def _generate_code(self) -> str:
        return "".join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))

    async def create_room(
        self, host_name: str, connection: Any = None
    ) -> tuple[Room, PlayerState, str]:
        """Open a room with its host seated; returns the host's token too."""
        async with self._lock:
            code = self._generate_code()
            while code in self._rooms:
                code = self._generate_code()

            game = create_game(code, self._config)
            host = game.add_player(host_name, connection)
            room = Room(code, game)
            token = room.issue_token(host.player_id)
            self._rooms[code] = room

        logger.info(f"Created room {code} (host {host_name})")
        return room, host, token

    async def get(self, code: str) -> Room:
        room = self._rooms.get(code.upper())
        if room is None:
            raise RoomNotFoundError("Room not found")
        return room

    async def join(self, code: str, name: str, connection: Any = None) -> tuple[PlayerState, str]:
        """
        Seat a player, or reconnect them by name if the match is under way.

        Reconnecting revokes the seat's previous tokens and issues a new one.
        """
        room = await self.get(code)
        if room.game.phase == MatchPhase.WAITING:
            player = await room.apply(room.game.add_player, name, connection)
            logger.info(f"{name} joined room {room.code}")
        else:
            player = await room.apply(room.game.reconnect_player, name, connection)
            room.revoke(player.player_id)
            logger.info(f"{name} reconnected to room {room.code}")
        return player, room.issue_token(player.player_id)

    async def attach(self, code: str, token: str, connection: Any = None) -> tuple[Room, PlayerState]:
        """Bind a live connection to the seat a token names."""
        room = await self.get(code)
        player = room.player_for(token)
        if not player.is_connected:
            await room.apply(room.game.resume_player, player.player_id, connection)
            logger.info(f"{player.name} resumed in room {room.code}")
        return room, player

    async def leave(self, code: str, token: str) -> None:
        room = await self.get(code)
        player = room.player_for(token)
        await room.apply(room.game.disconnect_player, player.player_id)
        if player not in room.game.players:
            room.revoke(player.player_id)
        logger.info(f"{player.name} left room {room.code}")

        if room.is_empty:
            async with self._lock:
                self._rooms.pop(room.code, None)
            logger.info(f"Closed empty room {room.code}")

    async def start(self, code: str, token: str) -> Room:
        room = await self.get(code)
        player = room.player_for(token)
        if room.host_id != player.player_id:
            raise NotHostError("Only the host can start the game")
        await room.apply(room.game.start)
        logger.info(f"Room {room.code} started with {len(room.game.players)} players")
        return room

    def __len__(self) -> int:
        return len(self._rooms)

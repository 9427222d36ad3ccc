from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Tuple

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from monopoly_deal import PlayerState
from monopoly_deal.exceptions import LookupFailure, MonopolyDealError, SequencingError
from monopoly_deal.rules import get_legal_actions
from monopoly_deal.snapshot import serialize_card

from .registry import AccessDenied, InvalidTokenError, Room, RoomNotFoundError, RoomRegistry
from .schemas import (
    ChatRequest,
    CreateRoomRequest,
    DiscardRequest,
    JoinRoomRequest,
    LegalActionsResponse,
    PlayCardRequest,
    PlayerRequest,
    RearrangeRequest,
    RespondRequest,
    RoomJoinedResponse,
    SnapshotResponse,
)
from .settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Monopoly Deal server")
    yield
    logger.info(f"Shutting down with {len(registry)} open rooms")


app = FastAPI(
    title="Monopoly Deal Server",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
registry = RoomRegistry()


# ---- Error mapping ----

@app.exception_handler(MonopolyDealError)
async def game_error_handler(request: Request, exc: MonopolyDealError):
    if isinstance(exc, AccessDenied):
        status = 403
    elif isinstance(exc, LookupFailure):
        status = 404
    elif isinstance(exc, SequencingError):
        status = 409
    else:
        status = 400
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# ---- Rooms ----

@app.get("/health")
async def health():
    return {"status": "ok", "rooms": len(registry)}


@app.post("/rooms", response_model=RoomJoinedResponse)
async def create_room(req: CreateRoomRequest):
    room, host, token = await registry.create_room(req.player_name)
    return RoomJoinedResponse(room_code=room.code, player_id=host.player_id, token=token)


@app.post("/rooms/{code}/join", response_model=RoomJoinedResponse)
async def join_room(code: str, req: JoinRoomRequest):
    player, token = await registry.join(code, req.player_name)
    return RoomJoinedResponse(room_code=code.upper(), player_id=player.player_id, token=token)


@app.post("/rooms/{code}/leave")
async def leave_room(code: str, req: PlayerRequest):
    await registry.leave(code, req.token)
    return {"room_code": code.upper(), "left": True}


@app.post("/rooms/{code}/start", response_model=SnapshotResponse)
async def start_game(code: str, req: PlayerRequest):
    room = await registry.start(code, req.token)
    player = room.player_for(req.token)
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.get("/rooms/{code}/snapshot", response_model=SnapshotResponse)
async def get_snapshot(code: str, token: str):
    room, player = await _seat(code, token)
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.get("/rooms/{code}/legal_actions", response_model=LegalActionsResponse)
async def legal_actions(code: str, token: str):
    room, player = await _seat(code, token)
    actions = await room.read(get_legal_actions, room.game, player.player_id)
    return LegalActionsResponse(
        room_code=room.code,
        player_id=player.player_id,
        actions=[{"action_type": a.action_type.value, **_jsonable(a.params)} for a in actions],
    )


@app.post("/rooms/{code}/chat")
async def send_chat(code: str, req: ChatRequest):
    room, player = await _seat(code, req.token)
    message = await room.chat(player, req.message)
    logger.debug(f"Chat in room {room.code} from {player.name}")
    return message


async def _seat(code: str, token: str) -> Tuple[Room, PlayerState]:
    room = await registry.get(code)
    return room, room.player_for(token)


def _jsonable(params: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in params.items()}


# ---- Turn actions ----

@app.post("/rooms/{code}/draw")
async def draw_cards(code: str, req: PlayerRequest):
    room, player = await _seat(code, req.token)
    drawn = await room.apply(room.game.draw_cards, player.player_id)
    return {"drawn": [serialize_card(c) for c in drawn]}


@app.post("/rooms/{code}/play", response_model=SnapshotResponse)
async def play_card(code: str, req: PlayCardRequest):
    room, player = await _seat(code, req.token)
    target = req.target.to_target() if req.target is not None else None
    await room.apply(room.game.play_card, player.player_id, req.card_id, target)
    if room.game.winner is not None:
        logger.info(f"Room {room.code} won by {room.game.winner}")
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.post("/rooms/{code}/respond", response_model=SnapshotResponse)
async def respond_to_action(code: str, req: RespondRequest):
    room, player = await _seat(code, req.token)
    await room.apply(room.game.respond_to_action, player.player_id, req.to_response())
    if room.game.winner is not None:
        logger.info(f"Room {room.code} won by {room.game.winner}")
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.post("/rooms/{code}/discard", response_model=SnapshotResponse)
async def discard_cards(code: str, req: DiscardRequest):
    room, player = await _seat(code, req.token)
    await room.apply(room.game.discard_cards, player.player_id, req.card_ids)
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.post("/rooms/{code}/rearrange", response_model=SnapshotResponse)
async def rearrange_property(code: str, req: RearrangeRequest):
    room, player = await _seat(code, req.token)
    await room.apply(
        room.game.rearrange_property, player.player_id, req.card_id, req.from_color, req.to_color
    )
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


@app.post("/rooms/{code}/end-turn", response_model=SnapshotResponse)
async def end_turn(code: str, req: PlayerRequest):
    room, player = await _seat(code, req.token)
    await room.apply(room.game.end_turn_early, player.player_id)
    return SnapshotResponse(room_code=room.code, snapshot=await room.snapshot(player.player_id))


# ---- Live updates ----

@app.websocket("/ws/rooms/{code}")
async def ws_room(websocket: WebSocket, code: str, token: str):
    """
    Push snapshots and chat to one seat.

    The socket is that seat's connection. Opening it marks a disconnected
    seat connected again and closing it disconnects the seat.
    """
    await websocket.accept()
    try:
        room, player = await registry.attach(code, token, websocket)
    except RoomNotFoundError:
        await websocket.close(code=4404)
        return
    except AccessDenied:
        await websocket.close(code=4403)
        return

    queue = await room.subscribe(player.player_id)
    heartbeat_seconds = get_settings().heartbeat_seconds

    async def sender():
        while True:
            msg = await queue.get()
            await websocket.send_json(msg)

    async def heartbeat():
        while True:
            await asyncio.sleep(heartbeat_seconds)
            await websocket.send_json({"type": "heartbeat"})

    sender_task = asyncio.create_task(sender())
    hb_task = asyncio.create_task(heartbeat())
    try:
        # Inputs arrive over HTTP; the socket only keeps the subscription alive.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        # Bookkeeping first: nothing here yields before the seat is released.
        await room.unsubscribe(queue)
        await _release_seat(room, player, token)
        sender_task.cancel()
        hb_task.cancel()
        await asyncio.gather(sender_task, hb_task, return_exceptions=True)


async def _release_seat(room: Room, player: PlayerState, token: str) -> None:
    try:
        await registry.leave(room.code, token)
    except (RoomNotFoundError, InvalidTokenError):
        # already left over HTTP, or the room closed first
        logger.debug(f"Socket for {player.name} closed after leaving room {room.code}")


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("server.app:app", host=settings.host, port=settings.port)

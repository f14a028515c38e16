"""
FastAPI transport for the conquest room.
Maps HTTP requests onto engine operations and pushes every change to websocket observers.
"""

import logging
import random
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.websockets import WebSocketDisconnect

from conquest.config import AI_TURN_DELAY_SECONDS, CORS_ORIGINS, LOG_LEVEL
from conquest.engine.definitions import list_maps, load_map
from conquest.engine.game import ActionResult, GameEngine
from conquest.engine.queries import get_attack_targets, get_fortify_targets
from conquest.engine.utils import generate_ai_id

from .auth import create_seat_token, get_seat_claims, get_seat_claims_optional
from .room import ConnectionManager, GameRoom

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Conquest Room API",
    description="Backend API for a turn-based territory-conquest room",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            print(f"[500] {method} {path}", flush=True)
        return response
    except Exception:
        print(f"[500] {method} {path} (exception)", flush=True)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers so the frontend can read the error."""
    logger.exception("unhandled error on %s", request.url.path)
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else (CORS_ORIGINS[0] if CORS_ORIGINS else "*")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


# One room per process; replaced on restart
room: GameRoom | None = None
connections = ConnectionManager()


# ===== Pydantic Models =====

class SeatRequest(BaseModel):
    player_id: str | None = None
    name: str | None = None
    automated: bool = False


class StartRequest(BaseModel):
    seats: list[SeatRequest] = Field(min_length=2)
    map_id: str | None = None
    seed: int | None = None
    shuffle_territories: bool = False
    continent_bonuses: bool | None = None
    restart: bool = False


class ReinforceRequest(BaseModel):
    territory_id: str
    amount: int


class TradeRequest(BaseModel):
    card_ids: list[str]


class AttackRequest(BaseModel):
    from_territory: str
    to_territory: str


class FortifyRequest(BaseModel):
    from_territory: str
    to_territory: str
    amount: int


# ===== Helper Functions =====

def get_room() -> GameRoom:
    if room is None:
        raise HTTPException(status_code=404, detail="No match is running")
    return room


def _require_seat(claims: dict) -> tuple[GameRoom, str]:
    """The room and the player id the seat token speaks for."""
    current = get_room()
    if claims.get("room") != current.room_id:
        raise HTTPException(status_code=401, detail="Seat token belongs to a previous match")
    player_id = claims["sub"]
    if player_id not in current.engine.state.players:
        raise HTTPException(status_code=401, detail="Unknown seat")
    return current, player_id


def _raise_for_failure(result: ActionResult) -> None:
    if not result:
        raise HTTPException(
            status_code=400,
            detail={"reason": result.reason.value if result.reason else None, "detail": result.message},
        )


async def _finish_action(current: GameRoom, player_id: str, result: ActionResult) -> dict[str, Any]:
    """Broadcast, hand control to the automated loop if needed and build the response."""
    _raise_for_failure(result)
    await current.publish([result], player_id)
    current.scheduler.reset_budget()
    current.kick()
    out: dict[str, Any] = {
        "state": current.engine.snapshot(player_id),
        "events": [e.to_dict() for e in result.events],
        "can_act": current.engine.current_player_id == player_id and current.engine.winner is None,
    }
    return out


@app.on_event("startup")
def on_startup():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.on_event("shutdown")
async def on_shutdown():
    if room is not None:
        await room.close()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Conquest Room API", "version": "1.0.0"}


@app.get("/maps")
def get_maps():
    return {"maps": list_maps()}


@app.post("/room/start")
async def start_match(request: StartRequest):
    """
    Seat players and start a match. Automated seats get generated AI_ ids;
    every human seat gets a seat token to authorize its actions.
    """
    global room
    if room is not None and room.engine.winner is None and not request.restart:
        raise HTTPException(status_code=409, detail="A match is already running")

    try:
        map_def = load_map(request.map_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid map: {e}")

    rng = random.Random(request.seed)
    player_ids: list[str] = []
    names: dict[str, str] = {}
    automated: set[str] = set()
    for index, seat in enumerate(request.seats):
        if seat.automated:
            player_id = seat.player_id or generate_ai_id(index, rng)
            automated.add(player_id)
        else:
            player_id = seat.player_id or f"player_{index + 1}"
        player_ids.append(player_id)
        if seat.name:
            names[player_id] = seat.name

    try:
        engine = GameEngine(
            player_ids,
            map_def,
            rng,
            names=names,
            ai_player_ids=automated,
            shuffle_territories=request.shuffle_territories,
            continent_bonuses=request.continent_bonuses,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if room is not None:
        await room.close()
    room = GameRoom(engine, connections, ai_delay=AI_TURN_DELAY_SECONDS)
    logger.info("room %s started with %s", room.room_id, player_ids)

    tokens = {
        player_id: create_seat_token(player_id, room.room_id)
        for player_id in player_ids
        if player_id not in automated
    }
    await room.publish([])
    room.kick()
    return {
        "room_id": room.room_id,
        "players": player_ids,
        "seat_tokens": tokens,
        "state": engine.snapshot(),
    }


@app.get("/room/state")
def get_state(claims: dict | None = Depends(get_seat_claims_optional)):
    """Public snapshot; a valid seat token also reveals that seat's hand."""
    current = get_room()
    viewer = None
    if claims and claims.get("room") == current.room_id:
        viewer = claims.get("sub")
    return current.engine.snapshot(viewer)


@app.get("/room/map")
def get_map():
    return get_room().engine.map_def.to_dict()


@app.get("/room/available-actions")
def get_available_actions(claims: dict = Depends(get_seat_claims)):
    """What the seat may do right now, with attack and fortify targets per source."""
    current, player_id = _require_seat(claims)
    engine = current.engine
    out = engine.available_actions(player_id)
    state = engine.state
    out["attack_targets"] = {
        tid: get_attack_targets(state, player_id, tid, engine.map_def)
        for tid in out["attack_sources"]
    }
    out["fortify_targets"] = {
        tid: get_fortify_targets(state, player_id, tid, engine.map_def)
        for tid in state.territories_owned_by(player_id)
        if state.territories[tid].troops > 1
    }
    return out


@app.post("/room/reinforce")
async def do_reinforce(request: ReinforceRequest, claims: dict = Depends(get_seat_claims)):
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.reinforce(player_id, request.territory_id, request.amount)
        return await _finish_action(current, player_id, result)


@app.post("/room/trade")
async def do_trade(request: TradeRequest, claims: dict = Depends(get_seat_claims)):
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.trade_cards(player_id, request.card_ids)
        return await _finish_action(current, player_id, result)


@app.post("/room/attack")
async def do_attack(request: AttackRequest, claims: dict = Depends(get_seat_claims)):
    """One exchange of dice. The response carries dice_results like the attack_result broadcast."""
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.attack(player_id, request.from_territory, request.to_territory)
        out = await _finish_action(current, player_id, result)
    out["dice_results"] = {"attacker": [result.attacker_die], "defender": [result.defender_die]}
    out["conquered"] = result.conquered
    return out


@app.post("/room/end-attack")
async def do_end_attack(claims: dict = Depends(get_seat_claims)):
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.end_attack_phase(player_id)
        return await _finish_action(current, player_id, result)


@app.post("/room/fortify")
async def do_fortify(request: FortifyRequest, claims: dict = Depends(get_seat_claims)):
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.fortify(
            player_id, request.from_territory, request.to_territory, request.amount
        )
        return await _finish_action(current, player_id, result)


@app.post("/room/skip-fortify")
async def do_skip_fortify(claims: dict = Depends(get_seat_claims)):
    current, player_id = _require_seat(claims)
    async with current.lock:
        result = current.engine.skip_fortify(player_id)
        return await _finish_action(current, player_id, result)


@app.websocket("/room/ws")
async def room_updates(websocket: WebSocket):
    """Observers get the current snapshot on connect, then every broadcast."""
    await connections.connect(websocket)
    try:
        if room is not None:
            await websocket.send_json({"type": "game_update", "state": room.engine.snapshot()})
        while True:
            # Inbound messages are ignored; actions go through the HTTP endpoints
            await websocket.receive_text()
    except WebSocketDisconnect:
        connections.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

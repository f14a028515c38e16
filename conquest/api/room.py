"""
In-memory game room backing the HTTP API: one engine, its automated-turn
scheduler and the websocket observers that receive every update.
"""

import asyncio
import logging
import uuid
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from conquest.config import AI_TURN_DELAY_SECONDS
from conquest.engine.game import ActionResult, AttackResult, GameEngine
from conquest.engine.scheduler import TurnScheduler

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Websocket observers. Outlives rooms so a restart keeps everyone subscribed."""

    def __init__(self) -> None:
        self.active: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active.append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active:
            self.active.remove(websocket)

    async def broadcast(self, message: dict[str, Any]) -> None:
        for websocket in list(self.active):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.debug("dropping websocket observer: %s", exc)
                self.disconnect(websocket)


class GameRoom:
    def __init__(
        self,
        engine: GameEngine,
        connections: ConnectionManager,
        ai_delay: float = AI_TURN_DELAY_SECONDS,
    ) -> None:
        self.room_id = uuid.uuid4().hex
        self.engine = engine
        self.scheduler = TurnScheduler(engine)
        self.connections = connections
        self.ai_delay = ai_delay
        self.lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def automation_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def attack_message(self, player_id: str, result: AttackResult) -> dict[str, Any]:
        payload = result.to_dict()
        payload["type"] = "attack_result"
        payload["player"] = player_id
        return payload

    async def publish(self, results: list[ActionResult], player_id: str | None = None) -> None:
        """Broadcast the dice of any attacks, the events and then the new public state."""
        for result in results:
            if isinstance(result, AttackResult) and result and player_id is not None:
                await self.connections.broadcast(self.attack_message(player_id, result))
        events = [e.to_dict() for r in results for e in r.events]
        if events:
            await self.connections.broadcast({"type": "events", "events": events})
        await self.connections.broadcast({"type": "game_update", "state": self.engine.snapshot()})

    def kick(self) -> None:
        """Start the automated loop if the player now up is automated."""
        if not self.scheduler.schedule() and not self.scheduler.pending:
            return
        if self.automation_running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self.run_automated(), name=f"conquest-room-{self.room_id[:8]}")

    async def run_automated(self) -> None:
        """Drain the scheduler queue, pausing before each step and broadcasting after it."""
        try:
            while self.scheduler.pending:
                if self.ai_delay > 0:
                    await asyncio.sleep(self.ai_delay)
                async with self.lock:
                    results = self.scheduler.run_next()
                    step = self.scheduler.last_step
                    await self.publish(results, step.player_id if step else None)
            engine = self.engine
            if self.scheduler.exhausted and engine.winner is None and engine.is_automated(engine.current_player_id):
                await self.connections.broadcast({
                    "type": "automation_halted",
                    "steps_run": self.scheduler.steps_run,
                    "state": engine.snapshot(),
                })
        finally:
            self._task = None

    async def close(self) -> None:
        task = self._task
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("automated loop for room %s cancelled", self.room_id)
        self._task = None

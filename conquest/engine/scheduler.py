"""
Queue of pending automated steps.

After each mutation the caller asks the scheduler to schedule(); at most one
step is queued at a time, and only for a live automated current player. The
caller decides when to run it (immediately, or after a delay on an event loop).
"""

import logging
from collections import deque
from dataclasses import dataclass

from conquest.config import MAX_AUTOMATED_STEPS
from conquest.engine.game import ActionResult, GameEngine
from conquest.engine.policy import ScriptedPolicy

logger = logging.getLogger(__name__)


@dataclass
class ScheduledStep:
    player_id: str
    phase: str


class TurnScheduler:
    def __init__(
        self,
        engine: GameEngine,
        policy: ScriptedPolicy | None = None,
        max_steps: int = MAX_AUTOMATED_STEPS,
    ) -> None:
        self.engine = engine
        self.policy = policy or ScriptedPolicy()
        self.max_steps = max_steps
        self.steps_run = 0
        self.last_step: ScheduledStep | None = None
        self._queue: deque[ScheduledStep] = deque()

    @property
    def pending(self) -> bool:
        return bool(self._queue)

    @property
    def exhausted(self) -> bool:
        return self.steps_run >= self.max_steps

    def schedule(self) -> bool:
        """Queue a step for the current player if they are automated. Returns True if queued."""
        engine = self.engine
        if self._queue or engine.winner is not None or self.exhausted:
            return False
        player_id = engine.current_player_id
        if not engine.is_automated(player_id) or not engine.is_alive(player_id):
            return False
        self._queue.append(ScheduledStep(player_id, engine.phase))
        return True

    def run_next(self) -> list[ActionResult]:
        """Execute the queued step, if it is still current, then schedule the next one."""
        if not self._queue:
            return []
        step = self._queue.popleft()
        engine = self.engine
        if engine.current_player_id != step.player_id or engine.phase != step.phase:
            # State moved on since the step was queued
            logger.debug("dropping stale step for %s in %s", step.player_id, step.phase)
            self.schedule()
            return []

        self.last_step = step
        self.steps_run += 1
        logger.info("automated step %d: %s %s", self.steps_run, step.player_id, step.phase)
        results = self.policy.take_step(engine, step.player_id)
        if engine.winner is not None:
            logger.info("match over, winner %s", engine.winner)
        elif self.exhausted:
            logger.warning("automated step limit (%d) reached", self.max_steps)
        elif any(results):
            self.schedule()
        return results

    def run_until_human(self) -> int:
        """Run queued steps synchronously until a human is up, the game ends or the cap is hit."""
        self.schedule()
        count = 0
        while self._queue:
            self.run_next()
            count += 1
        return count

    def reset_budget(self) -> None:
        """Start counting steps again, e.g. after a human has acted."""
        self.steps_run = 0

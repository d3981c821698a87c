from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from polysum.core.config import GameConfig
from polysum.core.goals import GoalGenerator
from polysum.core.hints import find_hint
from polysum.core.layout import PlacementStrategy
from polysum.core.motion import Body, Bounds, spawn_body
from polysum.core.rounds import Entity, Round, RoundBuilder, next_round
from polysum.core.scheduler import Scheduler, TaskHandle
from polysum.core.scoring import Score, ScoreStore
from polysum.core.selection import Evaluation, PickResult, SelectionTracker
from polysum.core.shapes import entity_at

logger = logging.getLogger(__name__)


class FeedbackSink:
    """Receives game events for the presentation layer. Every hook is a no-op by default."""

    def on_new_round(self, goal: int) -> None:
        pass

    def on_match(self, total: int) -> None:
        pass

    def on_mismatch(self, total: int) -> None:
        pass

    def on_hint(self, pair: Tuple[Entity, Entity]) -> None:
        pass

    def on_hint_cleared(self) -> None:
        pass

    def on_selection_changed(self, values: List[int]) -> None:
        pass

    def on_score_changed(self, current: int, best: int) -> None:
        pass


class GameSession:
    """All state of one play session: the current round, selection, score and shape motion.

    The session reacts to three kinds of triggers: picks (:meth:`handle_pick`,
    :meth:`request_hint`), animation ticks (:meth:`tick`) and its own delayed
    callbacks. Each round has a generation number; callbacks scheduled during
    an earlier round are cancelled when a new one starts and ignored if they
    run anyway.
    """

    def __init__(
        self,
        config: GameConfig,
        scheduler: Scheduler,
        store: Optional[ScoreStore] = None,
        feedback: Optional[FeedbackSink] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config.validate()
        self._scheduler = scheduler
        self._store = store
        self._feedback = feedback or FeedbackSink()
        self._rng = rng or random.Random()

        self._generator = GoalGenerator(config.min_goal, config.max_goal, self._rng)
        self._builder = RoundBuilder(self._rng)
        self._layout: PlacementStrategy = config.make_layout()
        self._bounds = Bounds(config.arena_width, config.arena_height)

        best = store.load() if store is not None else 0
        self._score = Score(current=0, best=best)
        self._round: Optional[Round] = None
        self._tracker = SelectionTracker(goal=0)
        self._bodies: Dict[int, Body] = {}
        self._generation = 0
        self._pending: List[TaskHandle] = []
        self._evaluate_task: Optional[TaskHandle] = None
        self._resolving = False
        self._hint_pair: Optional[Tuple[Entity, Entity]] = None
        self._hint_task: Optional[TaskHandle] = None

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def round(self) -> Optional[Round]:
        return self._round

    @property
    def goal(self) -> Optional[int]:
        return self._round.goal if self._round is not None else None

    @property
    def entities(self) -> Sequence[Entity]:
        return self._round.entities if self._round is not None else ()

    @property
    def bodies(self) -> Dict[int, Body]:
        return self._bodies

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def score(self) -> Score:
        return self._score

    @property
    def selection(self) -> SelectionTracker:
        return self._tracker

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def hint(self) -> Optional[Tuple[Entity, Entity]]:
        return self._hint_pair

    def set_feedback(self, feedback: FeedbackSink) -> None:
        self._feedback = feedback

    # -- lifecycle ---------------------------------------------------------

    def new_game(self) -> None:
        """Reset the current score and start a fresh round."""
        self._score.reset()
        self._feedback.on_score_changed(self._score.current, self._score.best)
        self._start_round()

    def shutdown(self) -> None:
        """Cancel everything still scheduled (e.g. on window close)."""
        self._cancel_pending()

    def _start_round(self) -> None:
        # built first so a failure leaves the previous round untouched
        new_round = next_round(
            self._generator,
            self._builder,
            self._config.shape_count,
            self._config.value_range,
            self._config.max_goal_retries,
        )
        self._cancel_pending()
        self._generation += 1
        self._clear_hint()

        self._round = new_round
        self._resolving = False
        self._tracker.reset(self._round.goal)
        self._bodies = self._spawn_bodies(self._round.entities)
        logger.info(
            "Round %d: goal %d, values %s",
            self._generation,
            self._round.goal,
            [e.value for e in self._round.entities],
        )
        self._feedback.on_new_round(self._round.goal)
        self._feedback.on_selection_changed([])

    def _spawn_bodies(self, entities: Sequence[Entity]) -> Dict[int, Body]:
        points = self._layout.place(len(entities), self._bounds.width, self._bounds.height, self._rng)
        speed = self._config.base_speed if self._config.motion_enabled else 0.0
        return {
            entity.id: spawn_body(x, y, self._rng, speed, self._config.shape_size)
            for entity, (x, y) in zip(entities, points)
        }

    # -- input -------------------------------------------------------------

    def entity_at(self, x: float, y: float) -> Optional[int]:
        return entity_at(self._bodies, [e.id for e in self.entities], x, y)

    def handle_pick(self, entity_id: int) -> Optional[PickResult]:
        """Apply a pick on *entity_id*. Unknown or stale ids are ignored."""
        self._clear_hint()
        entity = self._round.get(entity_id) if self._round is not None else None
        if entity is None:
            logger.info("Ignoring pick on unknown entity %s", entity_id)
            return None

        if self._resolving:
            # the evaluated pair stays on screen until it is cleared
            logger.debug("Pick on %s ignored while a result is shown", entity_id)
            return PickResult.LOCKED
        result = self._tracker.pick(entity)
        if result is PickResult.LOCKED:
            logger.debug("Pick on %s ignored while a pair is pending", entity_id)
            return result
        if result is PickResult.DESELECTED and self._evaluate_task is not None:
            self._evaluate_task.cancel()
            self._evaluate_task = None
        self._feedback.on_selection_changed(self._tracker.values)
        if result is PickResult.PAIR_READY:
            self._evaluate_task = self._schedule(self._config.evaluate_delay_ms, self._evaluate_selection)
        return result

    def request_hint(self) -> Optional[Tuple[Entity, Entity]]:
        """Flag a solving pair for a few seconds and return it."""
        if self._round is None:
            return None
        self._clear_hint()
        pair = find_hint(self._round.entities, self._round.goal)
        if pair is None:
            logger.warning("No pair sums to %d in round %d", self._round.goal, self._generation)
            return None
        for entity in pair:
            entity.hinted = True
        self._hint_pair = pair
        self._feedback.on_hint(pair)
        self._hint_task = self._schedule(self._config.hint_delay_ms, self._clear_hint)
        return pair

    def dismiss_hint(self) -> None:
        self._clear_hint()

    def _clear_hint(self) -> None:
        if self._hint_task is not None:
            self._hint_task.cancel()
            self._hint_task = None
        if self._hint_pair is None:
            return
        for entity in self._hint_pair:
            entity.hinted = False
        self._hint_pair = None
        self._feedback.on_hint_cleared()

    # -- evaluation ----------------------------------------------------------

    def _evaluate_selection(self) -> Evaluation:
        self._evaluate_task = None
        self._resolving = True
        evaluation = self._tracker.evaluate()
        if evaluation.is_match:
            if self._score.record_match() and self._store is not None:
                self._store.save(self._score.best)
            self._feedback.on_score_changed(self._score.current, self._score.best)
            self._feedback.on_match(evaluation.total)
            self._schedule(self._config.match_delay_ms, self._start_round)
        else:
            self._feedback.on_mismatch(evaluation.total)
            self._schedule(self._config.mismatch_delay_ms, self._clear_selection)
        return evaluation

    def _clear_selection(self) -> None:
        self._resolving = False
        self._tracker.clear()
        self._feedback.on_selection_changed([])

    # -- motion --------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance shape motion by *dt* seconds."""
        if not self._config.motion_enabled:
            return
        for body in self._bodies.values():
            body.advance(dt, self._bounds)

    def resize(self, width: float, height: float) -> None:
        """Use a new arena size; sizes below what the layout needs are raised to that minimum."""
        min_w, min_h = self._layout.minimum_arena(self._config.shape_count)
        if width < min_w or height < min_h:
            logger.debug("Arena %sx%s below minimum %sx%s", width, height, min_w, min_h)
        self._bounds = Bounds(max(width, min_w), max(height, min_h))
        for body in self._bodies.values():
            body.clamp(self._bounds)

    # -- scheduling ----------------------------------------------------------

    def _schedule(self, delay_ms: int, callback: Callable[[], object]) -> TaskHandle:
        generation = self._generation

        def run() -> None:
            if generation != self._generation:
                logger.debug("Dropping callback from round %d", generation)
                return
            callback()

        self._pending = [task for task in self._pending if task.active]
        task = self._scheduler.schedule(delay_ms, run)
        self._pending.append(task)
        return task

    def _cancel_pending(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending = []
        self._evaluate_task = None
        self._hint_task = None

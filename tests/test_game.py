"""Tests for polysum.core.game – the session that ties rounds, picks, hints and score together."""

from __future__ import annotations

import itertools
import math
import random
from pathlib import Path
from typing import List, Tuple

import pytest

from polysum.core.config import ConfigError, GameConfig
from polysum.core.game import FeedbackSink, GameSession
from polysum.core.hints import find_hint
from polysum.core.rounds import Entity
from polysum.core.scheduler import ManualScheduler
from polysum.core.scoring import ScoreStore
from polysum.core.selection import PickResult, SelectionState

GOAL_TEN = GameConfig(min_value=3, max_value=8, min_goal=10, max_goal=10)


class RecordingFeedback(FeedbackSink):
    def __init__(self) -> None:
        self.events: List[Tuple] = []

    def on_new_round(self, goal: int) -> None:
        self.events.append(("new_round", goal))

    def on_match(self, total: int) -> None:
        self.events.append(("match", total))

    def on_mismatch(self, total: int) -> None:
        self.events.append(("mismatch", total))

    def on_hint(self, pair) -> None:
        self.events.append(("hint", pair))

    def on_hint_cleared(self) -> None:
        self.events.append(("hint_cleared",))

    def on_selection_changed(self, values) -> None:
        self.events.append(("selection", list(values)))

    def on_score_changed(self, current: int, best: int) -> None:
        self.events.append(("score", current, best))

    def names(self) -> List[str]:
        return [e[0] for e in self.events]


# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def feedback() -> RecordingFeedback:
    return RecordingFeedback()


@pytest.fixture()
def store(tmp_path: Path) -> ScoreStore:
    return ScoreStore(tmp_path / "score.json")


@pytest.fixture()
def session(scheduler: ManualScheduler, feedback: RecordingFeedback, store: ScoreStore) -> GameSession:
    s = GameSession(GOAL_TEN, scheduler, store=store, feedback=feedback, rng=random.Random(1234))
    s.new_game()
    return s


def _solving_pair(session: GameSession) -> Tuple[Entity, Entity]:
    pair = find_hint(session.entities, session.goal)
    assert pair is not None
    return pair


def _losing_pair(session: GameSession) -> Tuple[Entity, Entity]:
    for a, b in itertools.combinations(session.entities, 2):
        if a.value + b.value != session.goal:
            return a, b
    pytest.fail("every pair in the round solves the goal")


def _play_match(session: GameSession, scheduler: ManualScheduler) -> None:
    a, b = _solving_pair(session)
    session.handle_pick(a.id)
    session.handle_pick(b.id)
    scheduler.advance(session.config.evaluate_delay_ms)


def _play_mismatch(session: GameSession, scheduler: ManualScheduler) -> None:
    a, b = _losing_pair(session)
    session.handle_pick(a.id)
    session.handle_pick(b.id)
    scheduler.advance(session.config.evaluate_delay_ms)
    scheduler.advance(session.config.mismatch_delay_ms)


# ---------------------------------------------------------------------------
# Startup / rounds
# ---------------------------------------------------------------------------

class TestStartup:
    def test_no_round_before_new_game(self, scheduler: ManualScheduler):
        s = GameSession(GOAL_TEN, scheduler)
        assert s.round is None
        assert s.goal is None
        assert s.entities == ()

    def test_infeasible_config_fails_at_startup(self, scheduler: ManualScheduler, feedback: RecordingFeedback):
        cfg = GameConfig(min_value=3, max_value=8, min_goal=50, max_goal=60)
        with pytest.raises(ConfigError):
            GameSession(cfg, scheduler, feedback=feedback)
        assert feedback.events == []

    def test_best_loaded_from_store(self, scheduler: ManualScheduler, store: ScoreStore):
        store.save(6)
        s = GameSession(GOAL_TEN, scheduler, store=store)
        assert s.score.best == 6
        assert s.score.current == 0

    def test_without_store(self, scheduler: ManualScheduler):
        s = GameSession(GOAL_TEN, scheduler, rng=random.Random(0))
        s.new_game()
        _play_match(s, scheduler)
        assert s.score.current == 1


class TestNewRound:
    def test_round_shape(self, session: GameSession):
        assert session.goal == 10
        assert len(session.entities) == GOAL_TEN.shape_count
        assert all(3 <= e.value <= 8 for e in session.entities)

    def test_scenario_goal_ten_contains_known_pair(self, session: GameSession):
        values = [e.value for e in session.entities]
        pairs = {(3, 7), (4, 6), (5, 5)}
        assert any(
            (min(a, b), max(a, b)) in pairs for a, b in itertools.combinations(values, 2)
        )

    @pytest.mark.parametrize("seed", range(25))
    def test_every_round_solvable(self, scheduler: ManualScheduler, seed: int):
        cfg = GameConfig()
        s = GameSession(cfg, scheduler, rng=random.Random(seed))
        for _ in range(10):
            s.new_game()
            assert cfg.min_goal <= s.goal <= cfg.max_goal
            assert s.round.is_solvable()

    def test_events(self, feedback: RecordingFeedback, session: GameSession):
        assert feedback.events[:3] == [("score", 0, 0), ("new_round", 10), ("selection", [])]

    def test_body_per_entity(self, session: GameSession):
        assert set(session.bodies) == {e.id for e in session.entities}

    def test_spawn_positions_do_not_overlap(self, session: GameSession):
        bodies = list(session.bodies.values())
        for a, b in itertools.combinations(bodies, 2):
            assert math.hypot(a.x - b.x, a.y - b.y) >= a.margin + b.margin - 1e-9

    def test_generation_increments(self, session: GameSession):
        before = session.generation
        session.new_game()
        assert session.generation == before + 1

    def test_new_game_replaces_entities(self, session: GameSession):
        old_ids = {e.id for e in session.entities}
        session.new_game()
        assert not old_ids & {e.id for e in session.entities}


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------

class TestPicks:
    def test_first_pick(self, session: GameSession, feedback: RecordingFeedback):
        e = session.entities[0]
        assert session.handle_pick(e.id) is PickResult.SELECTED
        assert e.selected
        assert feedback.events[-1] == ("selection", [e.value])

    def test_toggle_off(self, session: GameSession, feedback: RecordingFeedback):
        e = session.entities[0]
        session.handle_pick(e.id)
        assert session.handle_pick(e.id) is PickResult.DESELECTED
        assert not e.selected
        assert feedback.events[-1] == ("selection", [])

    def test_unknown_id_is_ignored(self, session: GameSession, caplog: pytest.LogCaptureFixture):
        caplog.set_level("INFO")
        assert session.handle_pick(-1) is None
        assert session.selection.state is SelectionState.EMPTY
        assert "unknown entity" in caplog.text

    def test_stale_id_from_previous_round(self, session: GameSession):
        stale = session.entities[0].id
        session.new_game()
        assert session.handle_pick(stale) is None
        assert session.selection.selection == ()

    def test_pick_before_new_game(self, scheduler: ManualScheduler):
        s = GameSession(GOAL_TEN, scheduler)
        assert s.handle_pick(1) is None

    def test_evaluation_waits_for_delay(self, session: GameSession, scheduler: ManualScheduler,
                                        feedback: RecordingFeedback):
        a, b = _solving_pair(session)
        session.handle_pick(a.id)
        assert session.handle_pick(b.id) is PickResult.PAIR_READY
        scheduler.advance(GOAL_TEN.evaluate_delay_ms - 1)
        assert "match" not in feedback.names()
        scheduler.advance(1)
        assert ("match", 10) in feedback.events

    def test_lockout_while_pending(self, session: GameSession, scheduler: ManualScheduler):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        other = next(e for e in session.entities if e is not a and e is not b)
        assert session.handle_pick(other.id) is PickResult.LOCKED
        assert session.selection.selection == (a, b)
        assert other.selected is False

    def test_toggle_off_while_pending_cancels_evaluation(self, session: GameSession, scheduler: ManualScheduler,
                                                         feedback: RecordingFeedback):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        assert session.handle_pick(b.id) is PickResult.DESELECTED
        assert session.selection.selection == (a,)
        assert feedback.events[-1] == ("selection", [a.value])
        scheduler.advance(GOAL_TEN.evaluate_delay_ms * 2)
        assert "mismatch" not in feedback.names()
        assert "match" not in feedback.names()
        assert session.selection.selection == (a,)
        assert scheduler.pending() == 0

    def test_new_pair_after_toggle_is_evaluated_once(self, session: GameSession, scheduler: ManualScheduler,
                                                     feedback: RecordingFeedback):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        assert session.selection.state is SelectionState.EMPTY
        c, d = _solving_pair(session)
        session.handle_pick(c.id)
        assert session.handle_pick(d.id) is PickResult.PAIR_READY
        scheduler.advance(GOAL_TEN.evaluate_delay_ms)
        assert feedback.names().count("match") == 1
        assert "mismatch" not in feedback.names()
        assert session.score.current == 1

    def test_locked_while_mismatch_shown(self, session: GameSession, scheduler: ManualScheduler):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        scheduler.advance(GOAL_TEN.evaluate_delay_ms)
        other = next(e for e in session.entities if e is not a and e is not b)
        assert session.handle_pick(a.id) is PickResult.LOCKED
        assert session.handle_pick(other.id) is PickResult.LOCKED
        assert session.selection.selection == (a, b)

    def test_locked_while_match_shown(self, session: GameSession, scheduler: ManualScheduler):
        a, b = _solving_pair(session)
        _play_match(session, scheduler)
        assert session.handle_pick(a.id) is PickResult.LOCKED
        assert session.selection.selection == (a, b)
        scheduler.advance(GOAL_TEN.evaluate_delay_ms * 5)
        assert session.score.current == 1

    @pytest.mark.parametrize("seed", range(10))
    def test_random_picks_keep_bound(self, scheduler: ManualScheduler, seed: int):
        rng = random.Random(seed)
        s = GameSession(GameConfig(), scheduler, rng=random.Random(seed))
        s.new_game()
        for _ in range(300):
            ids = [e.id for e in s.entities]
            s.handle_pick(rng.choice(ids))
            assert len(s.selection.selection) <= 2
            assert sum(e.selected for e in s.entities) == len(s.selection.selection)
            scheduler.advance(rng.choice([0, 50, 300, 1000]))


# ---------------------------------------------------------------------------
# Match / mismatch
# ---------------------------------------------------------------------------

class TestMatch:
    @pytest.mark.parametrize("seed", range(5))
    def test_wide_goal_range_keeps_playing(self, scheduler: ManualScheduler, seed: int):
        cfg = GameConfig(min_goal=6, max_goal=2000, max_goal_retries=5)
        s = GameSession(cfg, scheduler, rng=random.Random(seed))
        s.new_game()
        for played in range(1, 31):
            _play_match(s, scheduler)
            scheduler.advance(cfg.match_delay_ms)
            assert s.score.current == played
            assert 6 <= s.goal <= 16
            assert s.selection.state is SelectionState.EMPTY

    def test_match_scores_and_moves_on(self, session: GameSession, scheduler: ManualScheduler,
                                       feedback: RecordingFeedback):
        generation = session.generation
        _play_match(session, scheduler)
        assert session.score.current == 1
        assert ("score", 1, 1) in feedback.events
        assert feedback.events[-1] == ("match", 10)
        # pair stays selected while the result is shown
        assert session.selection.state is SelectionState.TWO_CHOSEN

        scheduler.advance(GOAL_TEN.match_delay_ms)
        assert session.generation == generation + 1
        assert session.selection.state is SelectionState.EMPTY
        assert not any(e.selected for e in session.entities)
        assert feedback.names()[-2:] == ["new_round", "selection"]

    def test_best_saved_on_new_best(self, session: GameSession, scheduler: ManualScheduler, store: ScoreStore):
        _play_match(session, scheduler)
        assert store.load() == 1

    def test_score_counts_each_match_once(self, session: GameSession, scheduler: ManualScheduler):
        for expected in range(1, 4):
            _play_match(session, scheduler)
            assert session.score.current == expected
            scheduler.advance(GOAL_TEN.match_delay_ms)

    def test_best_only_moves_past_prior_best(self, scheduler: ManualScheduler, store: ScoreStore):
        store.save(2)
        s = GameSession(GOAL_TEN, scheduler, store=store, rng=random.Random(5))
        s.new_game()
        bests = []
        for _ in range(3):
            _play_match(s, scheduler)
            bests.append((s.score.current, s.score.best, store.load()))
            scheduler.advance(GOAL_TEN.match_delay_ms)
        assert bests == [(1, 2, 2), (2, 2, 2), (3, 3, 3)]

    def test_new_game_resets_current_keeps_best(self, session: GameSession, scheduler: ManualScheduler):
        _play_match(session, scheduler)
        scheduler.advance(GOAL_TEN.match_delay_ms)
        session.new_game()
        assert session.score.current == 0
        assert session.score.best == 1


class TestMismatch:
    def test_mismatch_reports_total(self, session: GameSession, scheduler: ManualScheduler,
                                    feedback: RecordingFeedback):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        scheduler.advance(GOAL_TEN.evaluate_delay_ms)
        assert feedback.events[-1] == ("mismatch", a.value + b.value)
        assert session.score.current == 0

    def test_selection_cleared_after_delay(self, session: GameSession, scheduler: ManualScheduler,
                                           feedback: RecordingFeedback):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        scheduler.advance(GOAL_TEN.evaluate_delay_ms)
        scheduler.advance(GOAL_TEN.mismatch_delay_ms - 1)
        assert session.selection.state is SelectionState.TWO_CHOSEN
        scheduler.advance(1)
        assert session.selection.state is SelectionState.EMPTY
        assert not a.selected and not b.selected
        assert feedback.events[-1] == ("selection", [])

    def test_same_round_continues(self, session: GameSession, scheduler: ManualScheduler):
        generation = session.generation
        goal = session.goal
        _play_mismatch(session, scheduler)
        assert session.generation == generation
        assert session.goal == goal

    def test_no_score_on_mismatch(self, session: GameSession, scheduler: ManualScheduler, store: ScoreStore):
        _play_mismatch(session, scheduler)
        _play_mismatch(session, scheduler)
        assert session.score.current == 0
        assert store.load() == 0

    def test_can_pick_again_after_clear(self, session: GameSession, scheduler: ManualScheduler):
        _play_mismatch(session, scheduler)
        _play_match(session, scheduler)
        assert session.score.current == 1


# ---------------------------------------------------------------------------
# Stale callbacks
# ---------------------------------------------------------------------------

class TestStaleCallbacks:
    def test_new_game_cancels_pending_evaluation(self, session: GameSession, scheduler: ManualScheduler,
                                                 feedback: RecordingFeedback):
        a, b = _solving_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        session.new_game()
        scheduler.advance(5000)
        assert "match" not in feedback.names()
        assert session.score.current == 0
        assert scheduler.pending() == 0

    def test_new_game_cancels_pending_round_change(self, session: GameSession, scheduler: ManualScheduler):
        _play_match(session, scheduler)
        session.new_game()
        generation = session.generation
        scheduler.advance(GOAL_TEN.match_delay_ms)
        assert session.generation == generation

    def test_new_game_cancels_pending_clear(self, session: GameSession, scheduler: ManualScheduler):
        a, b = _losing_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        scheduler.advance(GOAL_TEN.evaluate_delay_ms)
        session.new_game()
        first = session.entities[0]
        session.handle_pick(first.id)
        scheduler.advance(GOAL_TEN.mismatch_delay_ms)
        assert session.selection.selection == (first,)

    def test_shutdown_cancels_everything(self, session: GameSession, scheduler: ManualScheduler):
        a, b = _solving_pair(session)
        session.handle_pick(a.id)
        session.handle_pick(b.id)
        session.request_hint()
        session.shutdown()
        assert scheduler.pending() == 0


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------

class TestHints:
    def test_hint_marks_pair(self, session: GameSession, feedback: RecordingFeedback):
        pair = session.request_hint()
        assert pair == find_hint(session.entities, 10)
        assert all(e.hinted for e in pair)
        assert pair[0].value + pair[1].value == 10
        assert feedback.events[-1] == ("hint", pair)
        assert session.hint == pair

    def test_hint_does_not_select(self, session: GameSession):
        session.request_hint()
        assert session.selection.state is SelectionState.EMPTY
        assert not any(e.selected for e in session.entities)

    def test_hint_expires(self, session: GameSession, scheduler: ManualScheduler, feedback: RecordingFeedback):
        pair = session.request_hint()
        scheduler.advance(GOAL_TEN.hint_delay_ms)
        assert not any(e.hinted for e in pair)
        assert session.hint is None
        assert feedback.events[-1] == ("hint_cleared",)

    def test_hint_repeatable(self, session: GameSession):
        first = session.request_hint()
        second = session.request_hint()
        assert first == second

    def test_repeat_restarts_timer(self, session: GameSession, scheduler: ManualScheduler):
        session.request_hint()
        scheduler.advance(GOAL_TEN.hint_delay_ms - 100)
        pair = session.request_hint()
        scheduler.advance(200)
        assert all(e.hinted for e in pair)
        scheduler.advance(GOAL_TEN.hint_delay_ms)
        assert not any(e.hinted for e in pair)

    def test_pick_clears_hint(self, session: GameSession):
        pair = session.request_hint()
        session.handle_pick(session.entities[0].id)
        assert not any(e.hinted for e in pair)

    def test_dismiss_hint(self, session: GameSession, feedback: RecordingFeedback):
        session.request_hint()
        session.dismiss_hint()
        assert session.hint is None
        assert feedback.events[-1] == ("hint_cleared",)

    def test_dismiss_without_hint_is_quiet(self, session: GameSession, feedback: RecordingFeedback):
        before = list(feedback.events)
        session.dismiss_hint()
        assert feedback.events == before

    def test_new_round_clears_hint(self, session: GameSession):
        pair = session.request_hint()
        session.new_game()
        assert not any(e.hinted for e in pair)
        assert session.hint is None

    def test_no_round_no_hint(self, scheduler: ManualScheduler):
        assert GameSession(GOAL_TEN, scheduler).request_hint() is None


# ---------------------------------------------------------------------------
# Motion and arena
# ---------------------------------------------------------------------------

class TestMotion:
    def test_tick_moves_bodies(self, session: GameSession):
        before = {i: (b.x, b.y) for i, b in session.bodies.items()}
        session.tick(0.5)
        after = {i: (b.x, b.y) for i, b in session.bodies.items()}
        assert before != after

    def test_fixed_layout_when_motion_disabled(self, scheduler: ManualScheduler):
        cfg = GameConfig(min_goal=10, max_goal=10, motion_enabled=False, layout_jitter=0.0)
        s = GameSession(cfg, scheduler, rng=random.Random(3))
        s.new_game()
        before = {i: (b.x, b.y) for i, b in s.bodies.items()}
        s.tick(10.0)
        assert {i: (b.x, b.y) for i, b in s.bodies.items()} == before
        _play_match(s, scheduler)
        assert s.score.current == 1

    def test_motion_does_not_touch_game_state(self, session: GameSession):
        values = [e.value for e in session.entities]
        goal = session.goal
        for _ in range(120):
            session.tick(1 / 60)
        assert [e.value for e in session.entities] == values
        assert session.goal == goal

    def test_entity_at_body_position(self, session: GameSession):
        target = session.entities[3]
        body = session.bodies[target.id]
        assert session.entity_at(body.x, body.y) == target.id

    def test_entity_at_empty_corner(self, session: GameSession):
        assert session.entity_at(1, 1) is None

    def test_resize(self, session: GameSession):
        session.resize(1000, 600)
        assert (session.bounds.width, session.bounds.height) == (1000, 600)

    def test_shrinking_pulls_still_bodies_inside(self, scheduler: ManualScheduler):
        cfg = GameConfig(min_goal=10, max_goal=10, motion_enabled=False)
        s = GameSession(cfg, scheduler, rng=random.Random(5))
        s.resize(1600, 900)
        s.new_game()
        s.resize(800, 400)
        for body in s.bodies.values():
            assert body.margin <= body.x <= 800 - body.margin
            assert body.margin <= body.y <= 400 - body.margin
        assert all(s.entity_at(b.x, b.y) is not None for b in s.bodies.values())

    def test_resize_clamped_to_minimum(self, session: GameSession):
        session.resize(10, 10)
        min_w, min_h = session.config.make_layout().minimum_arena(session.config.shape_count)
        assert (session.bounds.width, session.bounds.height) == (min_w, min_h)
        session.new_game()
        assert len(session.bodies) == session.config.shape_count

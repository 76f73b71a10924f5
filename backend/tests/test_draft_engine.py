"""Tests for the draft turn/phase state machine."""

import threading

import pytest

from wuwa_draft.exceptions import (
    ItemAlreadyBanned,
    ItemAlreadyPicked,
    NoActiveSession,
    NotAPlayer,
    NotYourTurn,
    PreconditionError,
    WrongPhaseKind,
)
from wuwa_draft.models.draft import DraftPhase
from wuwa_draft.models.draft_config import DraftConfig
from wuwa_draft.models.room import DiscordUser
from wuwa_draft.services.draft_engine import (
    PHASE_ORDER,
    DraftEngine,
    compute_transition,
    phase_entry,
)
from wuwa_draft.services.room_manager import RoomManager

P1 = DiscordUser(discord_id="p1", username="Player One")
P2 = DiscordUser(discord_id="p2", username="Player Two")
ACTORS = {1: "p1", 2: "p2"}


def make_engine(**config) -> DraftEngine:
    room = RoomManager(DraftConfig(**config))
    room.join(P1, "player1")
    room.join(P2, "player2")
    return DraftEngine(room)


def act(engine: DraftEngine, action: str, item_id: str):
    """Ban or pick ``item_id`` as whoever is on the clock."""
    session = engine.get_session_snapshot()
    return getattr(engine, action)(ACTORS[session.current_player], item_id)


def run_phase(engine: DraftEngine, action: str, prefix: str) -> list[int]:
    """Play out the current phase, returning the player order observed."""
    order = []
    phase = engine.get_session_snapshot().phase
    i = 0
    while engine.get_session_snapshot().phase == phase:
        session = engine.get_session_snapshot()
        order.append(session.current_player)
        act(engine, action, f"{prefix}{i}")
        i += 1
    return order


@pytest.fixture
def engine():
    return make_engine()


class TestStartAndReset:
    """Tests for session lifecycle."""

    def test_start_requires_both_players(self):
        room = RoomManager()
        room.join(P1, "player1")
        engine = DraftEngine(room)

        with pytest.raises(PreconditionError):
            engine.start_draft()
        assert engine.get_session_snapshot() is None

    def test_start_produces_fresh_session(self, engine):
        session = engine.start_draft()

        assert session.phase == DraftPhase.BAN_1
        assert session.current_player == 1
        assert session.bans == []
        assert session.picks == []
        assert session.player1_picks == []
        assert session.player2_picks == []
        for counter in (
            session.phase1_ban_count,
            session.phase2_ban_count,
            session.pick1_count,
            session.pick2_count,
        ):
            assert counter.to_dict() == {"player1": 0, "player2": 0}

    def test_start_replaces_existing_session(self, engine):
        engine.start_draft()
        act(engine, "ban", "a")

        session = engine.start_draft()
        assert session.bans == []
        assert session.current_player == 1

    def test_no_session_snapshot_is_none(self, engine):
        assert engine.get_session_snapshot() is None

    def test_reset_then_actions_fail(self, engine):
        engine.start_draft()
        engine.reset_draft()

        assert engine.get_session_snapshot() is None
        with pytest.raises(NoActiveSession):
            engine.ban("p1", "a")
        with pytest.raises(NoActiveSession):
            engine.pick("p1", "a")

    def test_reset_without_session_succeeds(self, engine):
        engine.reset_draft()
        assert engine.get_session_snapshot() is None

    def test_snapshot_is_a_copy(self, engine):
        session = engine.start_draft()
        session.bans.append("tampered")
        session.current_player = 2

        snapshot = engine.get_session_snapshot()
        assert snapshot.bans == []
        assert snapshot.current_player == 1


class TestBanPhase1:
    """Tests for ban1 turn order and balance bans."""

    def test_one_ban_each_goes_to_pick1(self, engine):
        engine.start_draft()

        session = engine.ban("p1", "a")
        assert session.phase == DraftPhase.BAN_1
        assert session.current_player == 2

        session = engine.ban("p2", "b")
        assert session.phase == DraftPhase.PICK_1
        assert session.current_player == 1

    def test_ban_record_and_counter(self, engine):
        engine.start_draft()
        session = engine.ban("p1", "a")

        assert session.bans[0].item_id == "a"
        assert session.bans[0].phase == "phase1"
        assert session.bans[0].banned_by == 1
        assert session.phase1_ban_count.player1 == 1
        assert session.phase1_ban_count.player2 == 0

    def test_balance_bans_route_back_to_player1(self):
        engine = make_engine(bans_phase1=1, balance_bans=1, balance_bans_player=1)
        engine.start_draft()

        assert engine.ban("p1", "a").current_player == 2
        session = engine.ban("p2", "b")
        assert session.phase == DraftPhase.BAN_1
        assert session.current_player == 1

        session = engine.ban("p1", "c")
        assert session.phase == DraftPhase.PICK_1
        assert session.current_player == 1
        assert session.phase1_ban_count.to_dict() == {"player1": 2, "player2": 1}
        assert session.balance_bans_used == 1

    def test_balance_bans_for_player2_skip_finished_player1(self):
        engine = make_engine(bans_phase1=1, balance_bans=2, balance_bans_player=2)
        engine.start_draft()

        order = run_phase(engine, "ban", "x")

        assert order == [1, 2, 2, 2]
        session = engine.get_session_snapshot()
        assert session.phase == DraftPhase.PICK_1
        assert session.phase1_ban_count.to_dict() == {"player1": 1, "player2": 3}
        assert session.balance_bans_used == 2

    def test_multiple_bans_alternate(self):
        engine = make_engine(bans_phase1=3)
        engine.start_draft()

        assert run_phase(engine, "ban", "x") == [1, 2, 1, 2, 1, 2]

    def test_no_phase1_bans_starts_in_pick1(self):
        engine = make_engine(bans_phase1=0)
        session = engine.start_draft()

        assert session.phase == DraftPhase.PICK_1
        assert session.current_player == 1

    def test_only_balance_bans_start_with_balance_player(self):
        engine = make_engine(bans_phase1=0, balance_bans=1, balance_bans_player=2)
        session = engine.start_draft()

        assert session.phase == DraftPhase.BAN_1
        assert session.current_player == 2

        session = engine.ban("p2", "a")
        assert session.phase == DraftPhase.PICK_1


class TestPickPhases:
    """Tests for snake-order pick phases."""

    def test_pick1_snake_order(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")

        order = run_phase(engine, "pick", "p1-")

        assert order == [1, 2, 2, 1, 1, 2]
        session = engine.get_session_snapshot()
        assert session.phase == DraftPhase.BAN_2
        assert session.current_player == 1
        assert session.pick1_count.to_dict() == {"player1": 3, "player2": 3}

    def test_pick2_snake_order_then_complete(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")
        run_phase(engine, "pick", "p1-")

        ban2_order = run_phase(engine, "ban", "b2-")
        assert ban2_order == [1, 2]
        assert engine.get_session_snapshot().current_player == 2

        order = run_phase(engine, "pick", "p2-")

        assert order == [2, 1, 1, 2, 2, 1]
        session = engine.get_session_snapshot()
        assert session.phase == DraftPhase.COMPLETE
        assert session.current_player is None
        assert session.pick2_count.to_dict() == {"player1": 3, "player2": 3}

    def test_custom_pick_quota_generalizes_snake(self):
        engine = make_engine(pick_quota_phase1=2, pick_quota_phase2=4)
        engine.start_draft()
        run_phase(engine, "ban", "b1-")

        assert run_phase(engine, "pick", "p1-") == [1, 2, 2, 1]
        run_phase(engine, "ban", "b2-")
        assert run_phase(engine, "pick", "p2-") == [2, 1, 1, 2, 2, 1, 1, 2]

    def test_pick_records_and_derived_lists(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")

        engine.pick("p1", "rover")
        engine.pick("p2", "jinhsi")
        session = engine.pick("p2", "changli")

        assert [(p.item_id, p.picked_by, p.order) for p in session.picks] == [
            ("rover", 1, 1),
            ("jinhsi", 2, 2),
            ("changli", 2, 3),
        ]
        assert session.player1_picks == ["rover"]
        assert session.player2_picks == ["jinhsi", "changli"]

    def test_zero_pick_quota_skips_phase(self):
        engine = make_engine(pick_quota_phase1=0)
        engine.start_draft()
        run_phase(engine, "ban", "b1-")

        assert engine.get_session_snapshot().phase == DraftPhase.BAN_2


class TestValidation:
    """Tests for rejected actions; the session must stay unchanged."""

    def test_not_a_player(self, engine):
        engine.start_draft()
        with pytest.raises(NotAPlayer):
            engine.ban("spectator", "a")

    def test_not_a_player_checked_before_session(self, engine):
        with pytest.raises(NotAPlayer):
            engine.pick("spectator", "a")

    def test_not_your_turn_leaves_session_unchanged(self, engine):
        engine.start_draft()
        before = engine.get_session_snapshot()

        with pytest.raises(NotYourTurn):
            engine.ban("p2", "a")

        assert engine.get_session_snapshot().to_dict() == before.to_dict()

    def test_ban_during_pick_phase(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")

        with pytest.raises(WrongPhaseKind):
            engine.ban("p1", "a")

    def test_pick_during_ban_phase(self, engine):
        engine.start_draft()
        with pytest.raises(WrongPhaseKind):
            engine.pick("p1", "a")

    def test_ban_already_banned(self, engine):
        engine.start_draft()
        engine.ban("p1", "a")
        with pytest.raises(ItemAlreadyBanned):
            engine.ban("p2", "a")

    def test_pick_banned_item(self, engine):
        engine.start_draft()
        engine.ban("p1", "a")
        engine.ban("p2", "b")

        with pytest.raises(ItemAlreadyBanned):
            engine.pick("p1", "a")
        assert engine.get_session_snapshot().picks == []

    def test_pick_already_picked(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")
        engine.pick("p1", "rover")

        with pytest.raises(ItemAlreadyPicked):
            engine.pick("p2", "rover")

    def test_ban_already_picked_item_in_ban2(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")
        run_phase(engine, "pick", "p1-")

        with pytest.raises(ItemAlreadyPicked):
            engine.ban("p1", "p1-0")

    def test_actions_after_complete(self, engine):
        engine.start_draft()
        run_phase(engine, "ban", "b1-")
        run_phase(engine, "pick", "p1-")
        run_phase(engine, "ban", "b2-")
        run_phase(engine, "pick", "p2-")

        with pytest.raises(WrongPhaseKind):
            engine.ban("p1", "new")
        with pytest.raises(WrongPhaseKind):
            engine.pick("p2", "new")


class TestInvariants:
    """Whole-draft properties."""

    def play_full_draft(self, engine):
        phases = [engine.get_session_snapshot().phase]
        for action, prefix in (("ban", "b1-"), ("pick", "p1-"), ("ban", "b2-"), ("pick", "p2-")):
            while engine.get_session_snapshot().phase.value.startswith(action):
                act(engine, action, f"{prefix}{len(phases)}")
                phases.append(engine.get_session_snapshot().phase)
        return phases

    def test_phases_only_move_forward_one_step(self):
        engine = make_engine(bans_phase1=2, bans_phase2=2, balance_bans=1, balance_bans_player=2)
        engine.start_draft()

        phases = self.play_full_draft(engine)

        indices = [PHASE_ORDER.index(p) for p in phases]
        for prev, cur in zip(indices, indices[1:]):
            assert cur in (prev, prev + 1)
        assert phases[-1] == DraftPhase.COMPLETE
        assert [p for i, p in enumerate(phases) if i == 0 or phases[i - 1] != p] == PHASE_ORDER

    def test_bans_and_picks_disjoint_without_duplicates(self, engine):
        engine.start_draft()
        self.play_full_draft(engine)
        session = engine.get_session_snapshot()

        banned = [b.item_id for b in session.bans]
        picked = [p.item_id for p in session.picks]
        assert len(banned) == len(set(banned))
        assert len(picked) == len(set(picked))
        assert not set(banned) & set(picked)
        assert set(session.player1_picks) == {p.item_id for p in session.picks if p.picked_by == 1}
        assert set(session.player2_picks) == {p.item_id for p in session.picks if p.picked_by == 2}

    def test_counters_match_quotas(self):
        engine = make_engine(bans_phase1=2, bans_phase2=1, balance_bans=1, balance_bans_player=1)
        engine.start_draft()
        self.play_full_draft(engine)
        session = engine.get_session_snapshot()

        assert session.phase1_ban_count.to_dict() == {"player1": 3, "player2": 2}
        assert session.phase2_ban_count.to_dict() == {"player1": 1, "player2": 1}
        assert session.pick1_count.to_dict() == {"player1": 3, "player2": 3}
        assert session.pick2_count.to_dict() == {"player1": 3, "player2": 3}

    def test_config_changes_apply_to_next_draft(self, engine):
        engine.start_draft()
        engine.room.update_config(P1, {"bans_phase1": 3})

        engine.ban("p1", "a")
        session = engine.ban("p2", "b")
        assert session.phase == DraftPhase.PICK_1

        session = engine.start_draft()
        assert session.config.bans_phase1 == 3


class TestComputeTransition:
    """Tests for the pure transition function."""

    def test_does_not_mutate_session(self, engine):
        engine.start_draft()
        session = engine.ban("p1", "a")
        before = session.to_dict()

        compute_transition(session)

        assert session.to_dict() == before

    def test_complete_is_terminal(self, engine):
        session = engine.start_draft()
        session.phase = DraftPhase.COMPLETE
        assert compute_transition(session) == (DraftPhase.COMPLETE, None)

    def test_phase_entry_all_zero_completes(self):
        config = DraftConfig(bans_phase1=0, bans_phase2=0, pick_quota_phase1=0, pick_quota_phase2=0)
        assert phase_entry(DraftPhase.BAN_1, config) == (DraftPhase.COMPLETE, None)

    def test_phase_entry_pick2_starts_with_player2(self):
        assert phase_entry(DraftPhase.PICK_2, DraftConfig()) == (DraftPhase.PICK_2, 2)


class TestConcurrency:
    """Tests for simultaneous actions against one engine."""

    def test_simultaneous_bans_resolve_to_one(self, engine):
        engine.start_draft()
        barrier = threading.Barrier(2)
        results = []
        errors = []

        def ban(item_id):
            barrier.wait()
            try:
                results.append(engine.ban("p1", item_id))
            except NotYourTurn as e:
                errors.append(e)

        threads = [threading.Thread(target=ban, args=(f"item{i}",)) for i in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(results) == 1
        assert len(errors) == 1
        session = engine.get_session_snapshot()
        assert session.phase1_ban_count.player1 == 1
        assert len(session.bans) == 1
        assert session.current_player == 2

"""Linear stage pipeline: adjacent moves, clamping and status coupling."""

from services.stages import (
    ACTIVE,
    COMPLETED,
    FIRST_STAGE,
    LAST_STAGE,
    PROJECT_STAGES,
    STAGE_GROUPS,
    next_stage,
    previous_stage,
    stage_index,
    stage_progress,
)


class TestStageList:

    def test_twenty_stages(self):
        assert len(PROJECT_STAGES) == 20
        assert len(set(PROJECT_STAGES)) == 20
        assert FIRST_STAGE == "Advance payment done"
        assert LAST_STAGE == "Final payment(done)/completed"

    def test_groups_cover_every_stage_once(self):
        grouped = [s for _, stages in STAGE_GROUPS for s in stages]
        assert grouped == PROJECT_STAGES

    def test_unknown_stage_counts_as_first(self):
        assert stage_index("Something else") == 0
        assert stage_index(None) == 0


class TestMoves:

    def test_advance_moves_one(self):
        move = next_stage(PROJECT_STAGES[4], ACTIVE)
        assert move.stage == PROJECT_STAGES[5]
        assert move.status == ACTIVE
        assert move.changed

    def test_retreat_at_first_is_noop(self):
        move = previous_stage(FIRST_STAGE, ACTIVE)
        assert move.stage == FIRST_STAGE
        assert not move.changed

    def test_advance_into_last_completes(self):
        move = next_stage(PROJECT_STAGES[-2], ACTIVE)
        assert move.stage == LAST_STAGE
        assert move.status == COMPLETED

    def test_advance_at_last_is_noop_and_stays_completed(self):
        move = next_stage(LAST_STAGE, COMPLETED)
        assert move.stage == LAST_STAGE
        assert move.status == COMPLETED
        assert not move.changed

    def test_retreat_from_last_reactivates(self):
        move = previous_stage(LAST_STAGE, COMPLETED)
        assert move.stage == PROJECT_STAGES[-2]
        assert move.status == ACTIVE

    def test_full_walk_is_adjacent(self):
        stage, status = FIRST_STAGE, ACTIVE
        seen = [stage]
        for _ in range(len(PROJECT_STAGES) + 3):
            stage, status, _changed = next_stage(stage, status)
            if stage != seen[-1]:
                seen.append(stage)
        assert seen == PROJECT_STAGES
        assert status == COMPLETED


class TestProgress:

    def test_bounds(self):
        assert stage_progress(FIRST_STAGE) == 0
        assert stage_progress(LAST_STAGE) == 100

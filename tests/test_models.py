"""Tests for data models."""

import pytest

from summit_lift.errors import ValidationError
from summit_lift.models.clipboard import Clipboard, ExerciseClip, WorkoutClip
from summit_lift.models.draft import SessionDraft
from summit_lift.models.exercises import (
    ExerciseDefinition,
    clamp_bodyweight_factor,
    default_bodyweight_factor,
    effective_load,
    normalize_exercise_name,
)
from summit_lift.models.plan import ExerciseInput, PlanPhase, resolve_active_phase
from summit_lift.models.session import (
    BodyweightLoad,
    ExerciseLog,
    FreeWeightLoad,
    SessionStatus,
    WorkoutSession,
)
from summit_lift.models.units import WeightUnit


class TestWeightUnit:
    """Tests for display unit conversion."""

    def test_kilograms_are_not_converted(self):
        assert WeightUnit.KG.from_kg(60) == 60
        assert WeightUnit.KG.to_kg(60) == 60

    def test_pound_conversion_factor(self):
        assert WeightUnit.LB.from_kg(1) == pytest.approx(2.2046226218)
        assert WeightUnit.LB.to_kg(2.2046226218) == pytest.approx(1)

    @pytest.mark.parametrize("unit", list(WeightUnit))
    @pytest.mark.parametrize("value", [0, 2.5, 60, 142.75])
    def test_round_trip(self, unit, value):
        assert unit.to_kg(unit.from_kg(value)) == pytest.approx(value)

    def test_format_drops_trailing_zero(self):
        assert WeightUnit.KG.format(60) == "60"
        assert WeightUnit.KG.format(62.5) == "62.5"
        assert WeightUnit.LB.format(60) == "132.3"
        assert WeightUnit.KG.format_with_symbol(60) == "60 kg"

    def test_parse_defaults_to_kilograms(self):
        assert WeightUnit.parse(None) is WeightUnit.KG
        assert WeightUnit.parse("stone") is WeightUnit.KG
        assert WeightUnit.parse(" LB ") is WeightUnit.LB


class TestExerciseDefinition:
    """Tests for exercise definitions and bodyweight heuristics."""

    def test_normalize(self):
        assert normalize_exercise_name("  Bench   PRESS ") == "bench press"
        assert normalize_exercise_name("Bench\tPress") == "bench press"

    def test_definition_fills_normalized_name(self):
        definition = ExerciseDefinition(name="  Back Squat ")
        assert definition.name == "Back Squat"
        assert definition.normalized_name == "back squat"

    @pytest.mark.parametrize(
        "name, factor",
        [
            ("Knee Push-ups", 0.55),
            ("Push-Up", 0.70),
            ("Diamond pushup", 0.70),
            ("Weighted Pull Up", 1.0),
            ("Chin-up", 1.0),
            ("Bench Dips", 1.0),
            ("Bench Press", 1.0),
        ],
    )
    def test_default_bodyweight_factor(self, name, factor):
        assert default_bodyweight_factor(name) == factor

    def test_create_uses_default_factor_but_not_flag(self):
        definition = ExerciseDefinition.create("Push Up")
        assert definition.bodyweight_factor == 0.70
        assert definition.is_bodyweight is False

    def test_clamp_bodyweight_factor(self):
        assert clamp_bodyweight_factor(1.5) == 1.2
        assert clamp_bodyweight_factor(-0.3) == 0.0
        assert clamp_bodyweight_factor(0.7) == 0.7

    def test_effective_load(self):
        assert effective_load(80, 0.7, 10) == pytest.approx(66.0)

    def test_dict_round_trip(self):
        definition = ExerciseDefinition(name="Dip", is_bodyweight=True, bodyweight_kg=82.0)
        restored = ExerciseDefinition.from_dict(definition.to_dict(), id=definition.id)
        assert restored == definition


class TestExerciseInput:
    """Tests for exercise form validation."""

    def test_valid_input(self):
        data = ExerciseInput(name="Squat", target_weight="100", target_reps_min="5")
        assert data.is_valid()
        assert data.cleaned()["target_weight"] == 100.0
        assert data.cleaned()["target_reps_min"] == 5

    def test_missing_name(self):
        assert "Exercise name is required" in ExerciseInput(name="  ").validation_errors()

    def test_min_above_max(self):
        data = ExerciseInput(name="Squat", target_reps_min=10, target_reps_max=8)
        assert "Minimum reps cannot exceed maximum reps" in data.validation_errors()

    def test_unparseable_numbers(self):
        data = ExerciseInput(name="Squat", target_weight="heavy", number_of_sets="abc")
        problems = data.validation_errors()
        assert len(problems) == 2
        assert not data.is_valid()

    def test_zero_sets_and_negative_weight(self):
        data = ExerciseInput(name="Squat", target_weight=-5, number_of_sets=0)
        problems = data.validation_errors()
        assert "Target weight cannot be negative" in problems
        assert "Number of sets must be greater than 0" in problems

    @pytest.mark.parametrize("weight", ["nan", "inf", "-inf", float("nan"), float("inf")])
    def test_non_finite_weight_rejected(self, weight):
        data = ExerciseInput(name="Row", target_weight=weight)
        assert data.validation_errors() == [f"Target weight {weight!r} is not a number"]
        assert data.cleaned()["target_weight"] is None


class TestPhases:
    """Tests for active phase resolution."""

    def test_explicit_active_phase_wins(self):
        phases = [
            PlanPhase(plan_id="p", name="Base", order_index=0),
            PlanPhase(plan_id="p", name="Peak", order_index=1, is_active=True),
        ]
        assert resolve_active_phase(phases).name == "Peak"

    def test_lowest_index_when_none_active(self):
        phases = [
            PlanPhase(plan_id="p", name="Peak", order_index=1),
            PlanPhase(plan_id="p", name="Base", order_index=0),
        ]
        assert resolve_active_phase(phases).name == "Base"

    def test_no_phases(self):
        assert resolve_active_phase([]) is None


def make_session(reps=None) -> WorkoutSession:
    session = WorkoutSession(workout_id="w", workout_name="A", plan_id="p", plan_name="Plan")
    session.logs.append(
        ExerciseLog(
            session_id=session.id,
            definition_id="d",
            exercise_name="Squat",
            load=FreeWeightLoad(weight=60),
            reps=list(reps or [0, 0, 0]),
        )
    )
    return session


class TestExerciseLog:
    """Tests for per-exercise metrics."""

    def test_free_weight_metrics(self):
        log = make_session([8, 7, 6]).logs[0]
        assert log.estimated_one_rep_max == pytest.approx(76.0)
        assert log.volume == pytest.approx(60 * 21)
        assert log.best_set == (1, 8)
        assert not log.is_bodyweight

    def test_bodyweight_load_uses_effective_weight(self):
        log = ExerciseLog(
            session_id="s",
            definition_id="d",
            exercise_name="Push Up",
            load=BodyweightLoad(bodyweight_kg=80, factor=0.7, external_weight=10),
            reps=[10, 10],
        )
        assert log.is_bodyweight
        assert log.weight == 10
        assert log.effective_weight == pytest.approx(66.0)
        assert log.volume == pytest.approx(66.0 * 20)

    def test_with_external_weight_keeps_variant(self):
        load = BodyweightLoad(bodyweight_kg=80, factor=1.0).with_external_weight(5)
        assert isinstance(load, BodyweightLoad)
        assert load.external_weight == 5
        assert FreeWeightLoad(60).with_external_weight(65) == FreeWeightLoad(65)

    def test_best_set_without_sets(self):
        log = make_session().logs[0]
        log.reps = []
        assert log.best_set is None
        assert log.estimated_one_rep_max == 0

    def test_session_status(self):
        session = make_session()
        assert session.status is SessionStatus.IN_PROGRESS
        session.is_completed = True
        assert session.status is SessionStatus.COMPLETED


class TestSessionDraft:
    """Tests for in-memory session editing."""

    def test_set_reps_and_weight(self):
        draft = SessionDraft(make_session())
        draft.set_reps(0, 1, 7)
        draft.set_weight(0, 62.5)
        assert draft.entry(0).reps == [0, 7, 0]
        assert draft.entry(0).weight == 62.5
        assert draft.performed_sets() == 1

    def test_add_and_remove_sets(self):
        draft = SessionDraft(make_session([5, 5, 5]))
        assert draft.add_set(0) == 4
        assert draft.entry(0).reps == [5, 5, 5, 0]
        assert draft.remove_set(0, 0) == 3
        assert draft.remove_set(0) == 2
        assert draft.remove_set(0) == 1

    def test_cannot_remove_last_set(self):
        draft = SessionDraft(make_session([5]))
        with pytest.raises(ValidationError):
            draft.remove_set(0)

    def test_invalid_indices(self):
        draft = SessionDraft(make_session())
        with pytest.raises(ValidationError):
            draft.set_reps(0, 3, 5)
        with pytest.raises(ValidationError):
            draft.entry(1)
        with pytest.raises(ValidationError):
            draft.set_weight(0, -1)
        with pytest.raises(ValidationError):
            draft.set_weight(0, float("nan"))

    def test_from_session_copies(self):
        session = make_session()
        draft = SessionDraft.from_session(session)
        draft.set_reps(0, 0, 9)
        assert draft.persisted
        assert session.logs[0].reps == [0, 0, 0]


class TestClipboard:
    """Tests for the copy/paste clipboard."""

    def test_copying_workouts_clears_exercises(self):
        clipboard = Clipboard()
        clipboard.set_exercises([ExerciseClip("Squat", 100, 5, 8, 3)])
        clipboard.set_workouts([WorkoutClip("A")])
        assert clipboard.has_workouts
        assert not clipboard.has_exercises

    def test_dict_round_trip(self):
        clipboard = Clipboard()
        clipboard.set_workouts(
            [WorkoutClip("A", notes="heavy", exercises=(ExerciseClip("Squat", 100, 5, 8, 3),))]
        )
        assert Clipboard.from_dict(clipboard.to_dict()) == clipboard

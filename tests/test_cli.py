"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from summit_lift.cli import main


@pytest.fixture
def invoke(tmp_path):
    runner = CliRunner()

    def run(*args):
        return runner.invoke(main, ["--data-dir", str(tmp_path), *args])

    return run


@pytest.fixture
def initialized(invoke):
    result = invoke("init", "--no-seed")
    assert result.exit_code == 0, result.output
    return invoke


class TestInit:
    """Tests for database initialization."""

    def test_commands_require_init(self, invoke):
        result = invoke("plans", "list")
        assert result.exit_code == 1
        assert "not initialized" in result.output

    def test_init_without_seed(self, invoke):
        result = invoke("init", "--no-seed")
        assert result.exit_code == 0
        assert "Database initialized" in result.output
        assert "No plans found" in invoke("plans", "list").output

    def test_init_seeds_sample_plan(self, invoke):
        result = invoke("init")
        assert result.exit_code == 0
        assert "Sample plan and history created" in result.output
        assert "3-Day Split" in invoke("plans", "list").output
        assert "Pull Day" in invoke("session", "next").output

        again = invoke("init")
        assert "sample data skipped" in again.output


class TestPlanCommands:
    """Tests for building plans from the command line."""

    def test_build_plan(self, initialized):
        invoke = initialized
        assert "This is now your active plan" in invoke("plans", "create", "Strength").output
        assert invoke("plans", "add-workout", "Heavy").exit_code == 0
        result = invoke("plans", "add-exercise", "heavy", "Squat", "-w", "100", "-r", "5", "-s", "5")
        assert result.exit_code == 0, result.output
        assert "Squat: 5 x 5 @ 100 kg" in result.output

        shown = invoke("plans", "show")
        assert "Plan: Strength" in shown.output
        assert "Heavy" in shown.output

    def test_invalid_exercise_reports_problems(self, initialized):
        invoke = initialized
        invoke("plans", "create", "Strength")
        invoke("plans", "add-workout", "Heavy")
        result = invoke("plans", "add-exercise", "Heavy", "Squat", "-r", "12-8")
        assert result.exit_code == 1
        assert "Minimum reps cannot exceed maximum reps" in result.output

    def test_unknown_plan(self, initialized):
        result = initialized("plans", "show", "nope")
        assert result.exit_code == 1
        assert "Plan nope not found" in result.output

    def test_weights_entered_in_pounds(self, initialized):
        invoke = initialized
        assert invoke("units", "lb").exit_code == 0
        invoke("plans", "create", "Strength")
        invoke("plans", "add-workout", "Heavy")
        result = invoke("plans", "add-exercise", "Heavy", "Squat", "-w", "225", "-r", "5")
        assert "@ 225 lb" in result.output
        invoke("units", "kg")
        assert "@ 102.1 kg" in invoke("plans", "show").output


class TestSessionCommands:
    """Tests for running a workout from the command line."""

    @pytest.fixture
    def planned(self, initialized):
        invoke = initialized
        invoke("plans", "create", "Strength")
        invoke("plans", "add-workout", "A")
        invoke("plans", "add-workout", "B")
        invoke("plans", "add-exercise", "A", "Squat", "-w", "100", "-r", "5", "-s", "3")
        invoke("plans", "add-exercise", "B", "Bench Press", "-w", "60", "-r", "8", "-s", "3")
        return invoke

    def test_full_workout(self, planned):
        invoke = planned
        started = invoke("session", "start")
        assert started.exit_code == 0, started.output
        assert "Started 'A'" in started.output

        logged = invoke("session", "log", "1", "1", "5", "--weight", "102.5")
        assert logged.exit_code == 0, logged.output
        assert "Squat set 1: 5 reps @ 102.5 kg" in logged.output

        assert invoke("pro", "purchase").exit_code == 0
        completed = invoke("session", "complete")
        assert completed.exit_code == 0, completed.output
        assert "Completed 'A' (1 sets logged)" in completed.output

        assert "Next workout in 'Strength': B" in invoke("session", "next").output
        history = invoke("session", "history")
        assert "A" in history.output
        assert "512.5 kg" in history.output

    def test_start_resumes(self, planned):
        invoke = planned
        invoke("session", "start")
        assert "Resuming 'A'" in invoke("session", "start").output

    def test_log_without_session(self, planned):
        result = planned("session", "log", "1", "1", "5")
        assert result.exit_code == 1
        assert "No workout in progress" in result.output

    def test_discard(self, planned):
        invoke = planned
        invoke("session", "start")
        assert invoke("session", "discard", "--force").exit_code == 0
        assert "No workout in progress" in invoke("session", "show").output

    def test_set_editing(self, planned):
        invoke = planned
        invoke("session", "start")
        assert "now has 4 sets" in invoke("session", "add-set", "1").output
        assert "now has 3 sets" in invoke("session", "remove-set", "1").output
        result = invoke("session", "log", "1", "4", "5")
        assert result.exit_code == 1
        assert "Set #4 does not exist" in result.output


class TestBodyweightCommands:
    """Tests for body weight tracking."""

    def test_add_and_list(self, initialized):
        invoke = initialized
        assert "Logged 80.5 kg" in invoke("bodyweight", "add", "80.5").output
        assert "80.5 kg" in invoke("bodyweight", "list").output

    def test_non_positive_weight(self, initialized):
        result = initialized("bodyweight", "add", "0")
        assert result.exit_code == 1
        assert "Body weight must be greater than 0" in result.output

    def test_non_finite_weight(self, initialized):
        result = initialized("bodyweight", "add", "nan")
        assert result.exit_code == 1
        assert "No body weight logged yet" in initialized("bodyweight", "list").output

    def test_mark_bodyweight_exercise(self, initialized):
        invoke = initialized
        invoke("bodyweight", "add", "80")
        result = invoke("bodyweight", "exercise", "Dip", "--factor", "0.9")
        assert result.exit_code == 0, result.output
        assert "'Dip' counts 0.90 x body weight" in result.output
        assert "free-weight" in invoke("bodyweight", "exercise", "Dip", "--off").output


class TestStatsCommands:
    """Tests for progress statistics on the seeded history."""

    @pytest.fixture
    def seeded(self, invoke):
        assert invoke("init").exit_code == 0
        return invoke

    def test_exercise_series(self, seeded):
        result = seeded("stats", "exercise", "bench press")
        assert result.exit_code == 0, result.output
        assert "Bench Press" in result.output
        assert "Progress: +" in result.output
        assert "Suggested weight next time" in result.output

    def test_plan_series(self, seeded):
        result = seeded("stats", "plan")
        assert result.exit_code == 0, result.output
        assert "Strength score change" in result.output

    def test_logged_names(self, seeded):
        assert "Deadlift" in seeded("stats", "names").output

    def test_unknown_exercise(self, seeded):
        assert "No exercise named 'Lunge'" in seeded("stats", "exercise", "Lunge").output

"""Tests for the CLI entry point and the run writer."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from chirality.contracts import DocKind
from chirality.main import load_problem, main, run
from chirality.utils.writer import serialize_run, write_run


@pytest.fixture
def finished_state(problem, triple_for):
    return {
        "problem": problem,
        "finals": {DocKind.DS: triple_for(DocKind.DS), DocKind.M: triple_for(DocKind.M)},
        "deltas": {},
        "warnings": {},
        "round": 1,
        "max_rounds": 3,
        "convergence": {"round": 1, "convergence": "Closed", "open_issues": [], "summary": "Round 1: Closed."},
        "traces": [{"round": 1, "convergence": "Closed", "changed": {}, "warnings": {}}],
        "status": "closed",
    }


@pytest.fixture
def problem_file(tmp_path, problem):
    path = tmp_path / "problem.yaml"
    path.write_text(
        "title: {title}\nstatement: {statement}\ninitialVector:\n  - {v0}\n  - {v1}\n".format(
            title=problem["title"],
            statement=problem["statement"],
            v0=problem["initialVector"][0],
            v1=problem["initialVector"][1],
        )
    )
    return path


class TestLoadProblem:
    def test_loads_yaml(self, problem_file, problem):
        assert load_problem(problem_file) == problem

    def test_loads_json(self, tmp_path, problem):
        path = tmp_path / "problem.json"
        path.write_text(json.dumps(problem))
        assert load_problem(path) == problem

    def test_invalid_problem_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("title: only a title\n")
        with pytest.raises(ValueError, match="statement"):
            load_problem(path)


class TestWriter:
    def test_serialize_uses_plain_kind_keys(self, finished_state):
        data = serialize_run(finished_state)
        assert set(data["finals"]) == {"DS", "M"}
        json.dumps(data)  # must be JSON-serializable

    def test_write_run_named_after_title(self, finished_state, mock_config, tmp_path):
        mock_config["output_path"] = str(tmp_path / "out" / "run.json")
        path = write_run(finished_state)
        assert path == tmp_path / "out" / "cold-chain-vaccine-storage.json"
        assert json.loads(path.read_text())["status"] == "closed"

    def test_write_run_never_overwrites(self, finished_state, mock_config, tmp_path):
        mock_config["output_path"] = str(tmp_path / "run.json")
        first = write_run(finished_state)
        second = write_run(finished_state)
        assert first != second
        assert second.name == "cold-chain-vaccine-storage (2).json"

    def test_relative_output_path_anchored_to_project_root(
        self, finished_state, mock_config, tmp_path, monkeypatch
    ):
        root, elsewhere = tmp_path / "root", tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)
        mock_config["output_path"] = "./output/run.json"

        with patch("chirality.utils.writer.PROJECT_ROOT", root):
            path = write_run(finished_state)

        assert path == root / "output" / "cold-chain-vaccine-storage.json"
        assert not (elsewhere / "output").exists()

    def test_untitled_falls_back_to_config_stem(self, finished_state, mock_config, tmp_path):
        mock_config["output_path"] = str(tmp_path / "run.json")
        finished_state["problem"] = {**finished_state["problem"], "title": "!!!"}
        assert write_run(finished_state).name == "run.json"


class TestRun:
    @patch("chirality.main.write_run")
    @patch("chirality.main.run_rounds", new_callable=AsyncMock)
    def test_run_passes_override_and_writes(self, mock_rounds, mock_write, problem_file, finished_state, tmp_path, capsys):
        mock_rounds.return_value = finished_state
        mock_write.return_value = tmp_path / "x.json"

        assert run(problem_file, max_rounds=2) == tmp_path / "x.json"

        assert mock_rounds.call_args.kwargs == {"max_rounds": 2}
        mock_write.assert_called_once_with(finished_state)
        out = capsys.readouterr().out
        assert "Round 1 — Closed" in out
        assert "Status: closed" in out


class TestMain:
    @patch("chirality.main.run")
    def test_parses_max_rounds(self, mock_run, problem_file):
        with patch("sys.argv", ["chirality", str(problem_file), "--max-rounds", "5"]):
            main()
        mock_run.assert_called_once_with(problem_file, max_rounds=5)

    @patch("chirality.main.run")
    def test_missing_path_exits_with_usage(self, mock_run):
        with patch("sys.argv", ["chirality"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
        mock_run.assert_not_called()

    @patch("chirality.main.run")
    def test_bad_max_rounds_exits(self, mock_run, problem_file):
        with patch("sys.argv", ["chirality", str(problem_file), "--max-rounds", "many"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2

    def test_invalid_problem_exits_1(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("title: T\n")
        with patch("sys.argv", ["chirality", str(path)]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

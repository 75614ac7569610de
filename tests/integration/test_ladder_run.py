"""End-to-end runs over on-disk ladders: both passes, cleanup, reports and CLI."""

from __future__ import annotations

import errno
import io
import json
import logging
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import INVALID_DATA, build_module, data_name, tester_name

from exorcism.__main__ import cli
from exorcism.config import ExorcismConfig
from exorcism.display import Display
from exorcism.lifecycle import LifecycleController, WorkspaceError, discover_modules
from exorcism.models import LogFlag, MatchMode, ModuleState, Pass, Status, TrimFlag


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def console() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_controller(console):
    def _make(root, confirm=None, **overrides):
        overrides.setdefault("formats", ("txt", "json"))
        config = ExorcismConfig(**overrides)
        return LifecycleController(config, root, display=Display(file=console), confirm=confirm)

    return _make


@pytest.fixture
def reset_logging():
    yield
    logging.getLogger().handlers.clear()


def _report_files(root, pass_name):
    return sorted(p.name for p in root.glob(f"ExorcismReport_*_{pass_name}.*"))


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_ideal_module(self, ladder, make_controller):
        controller = make_controller(ladder, confirm=lambda prompt: pytest.fail(f"unexpected prompt: {prompt}"))
        assert controller.run() == 0
        assert controller.cleanup_report.deleted == []
        assert controller.states == {"M": ModuleState.DONE}

    def test_empty_data_file(self, ladder, module_dir, make_controller):
        (module_dir / data_name("M", 4)).write_text("")
        controller = make_controller(ladder, confirm=lambda prompt: False)
        modules = discover_modules(ladder)
        state, results = controller.validate_pass(modules, Pass.BEFORE)

        (result,) = results
        assert result.log.flags & LogFlag.DATA_EMPTY
        assert result.log.empty == [data_name("M", 4)]
        assert result.status == Status.PASSED_WITH_ISSUES
        assert state.passed_with_issues == 1

    def test_invalid_data_file_prompts_for_pair(self, ladder, module_dir, make_controller):
        (module_dir / data_name("M", 6)).write_text(INVALID_DATA)
        prompts: list[str] = []

        def confirm(prompt):
            prompts.append(prompt)
            return True

        controller = make_controller(ladder, confirm=confirm)
        modules = discover_modules(ladder)
        _, (before,) = controller.validate_pass(modules, Pass.BEFORE)
        assert before.log.flags & LogFlag.DATA_INVALID
        assert before.status == Status.FAILED

        report = controller.run_cleanup([before])
        assert prompts == [f"Delete {data_name('M', 6)} and its tester file?"]
        assert str(module_dir / data_name("M", 6)) in report.deleted
        assert str(module_dir / tester_name(6)) in report.deleted

        _, (after,) = controller.validate_pass(modules, Pass.AFTER, report)
        assert after.status == Status.PASSED

    def test_nearest_neighbour_match(self, ladder, module_dir, make_controller):
        (module_dir / tester_name(7)).rename(module_dir / tester_name(7, "240823_0941"))
        controller = make_controller(ladder)
        _, (result,) = controller.validate_pass(discover_modules(ladder), Pass.BEFORE)

        nearest = result.log.matches.by_mode(MatchMode.NEAREST)
        assert len(nearest) == 1
        assert nearest[0].tester == tester_name(7, "240823_0941")
        assert nearest[0].delta_seconds == 60.0
        assert not result.log.flags & LogFlag.NO_FEB_FILE
        assert result.status == Status.PASSED

    def test_unexpected_trim_file_is_deletable(self, ladder, module_dir, make_controller):
        stray = module_dir / "trim_files" / "stray.dat"
        stray.write_text("x")
        controller = make_controller(ladder, confirm=lambda prompt: True)
        _, (before,) = controller.validate_pass(discover_modules(ladder), Pass.BEFORE)
        assert before.trim.flags & TrimFlag.UNEXPECTED_FILES
        assert before.trim.unexpected == ["stray.dat"]

        assert controller.run() == 0
        assert not stray.exists()

    def test_protected_unexpected_file_survives(self, ladder, module_dir, make_controller):
        bogus = module_dir / "trim_files" / "bogus_HW_9_SET_elect.txt"
        bogus.write_text("x")
        controller = make_controller(ladder, assume_yes=True)
        assert controller.run() == 1
        assert bogus.exists()
        assert str(bogus) not in controller.cleanup_report.deleted


# ---------------------------------------------------------------------------
# Driver behaviour
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_reports_for_both_passes(self, ladder, make_controller):
        controller = make_controller(ladder)
        controller.run()
        before = _report_files(ladder, "before")
        after = _report_files(ladder, "after")
        assert [n.rsplit(".", 1)[1] for n in before] == ["json", "txt"]
        assert [n.rsplit(".", 1)[1] for n in after] == ["json", "txt"]
        assert before[0].startswith(f"ExorcismReport_L01_{controller.stamp}_")

    def test_after_summary_carries_cleanup(self, ladder, make_controller):
        controller = make_controller(ladder, assume_yes=True)
        controller.run()
        (after_json,) = [p for p in controller.reports[Pass.AFTER] if p.suffix == ".json"]
        (before_json,) = [p for p in controller.reports[Pass.BEFORE] if p.suffix == ".json"]
        assert "CLEANUP REPORT" in json.loads(after_json.read_text())["GlobalSummary"]
        assert "CLEANUP REPORT" not in json.loads(before_json.read_text())["GlobalSummary"]

    def test_skip_cleanup_still_runs_second_pass(self, ladder, module_dir, make_controller):
        (module_dir / "notes.txt").write_text("x")
        controller = make_controller(
            ladder, skip_cleanup=True, confirm=lambda prompt: pytest.fail("prompted")
        )
        assert controller.run() == 1
        assert (module_dir / "notes.txt").exists()
        assert Pass.AFTER in controller.reports
        assert controller.transitions["M"] == [
            ModuleState.UNSEEN, ModuleState.VALIDATED, ModuleState.REVALIDATED, ModuleState.DONE,
        ]

    def test_cleanup_step_recorded(self, ladder, make_controller):
        controller = make_controller(ladder, assume_yes=True)
        controller.run()
        assert controller.transitions["M"] == [
            ModuleState.UNSEEN, ModuleState.VALIDATED, ModuleState.CLEANED,
            ModuleState.REVALIDATED, ModuleState.DONE,
        ]

    def test_unwritable_output_dir_still_validates(self, ladder, tmp_path, make_controller):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        controller = make_controller(ladder, output_dir=str(blocker))
        assert controller.run() == 0
        assert controller.reports == {Pass.BEFORE: [], Pass.AFTER: []}

    def test_modules_sorted_and_hidden_skipped(self, ladder):
        build_module(ladder, "A")
        (ladder / ".cache").mkdir()
        assert [m.name for m in discover_modules(ladder)] == ["A", "M"]

    def test_mixed_ladder_exit_code(self, ladder, make_controller):
        broken = build_module(ladder, "B")
        shutil.rmtree(broken / "conn_check_files")
        controller = make_controller(ladder, assume_yes=True)
        assert controller.run() == 1

    def test_no_modules(self, tmp_path, make_controller):
        controller = make_controller(tmp_path)
        assert controller.run() == 1
        assert list(tmp_path.iterdir()) == []

    def test_unreadable_root_raises(self, tmp_path):
        with pytest.raises(WorkspaceError):
            discover_modules(tmp_path / "missing")

    def test_second_pass_idempotent_without_cleanup(self, ladder, module_dir, make_controller):
        (module_dir / "notes.txt").write_text("x")
        controller = make_controller(ladder)
        modules = discover_modules(ladder)
        first, _ = controller.validate_pass(modules, Pass.AFTER)
        second, _ = controller.validate_pass(modules, Pass.AFTER)
        assert first.pages == second.pages
        assert first.global_summary == second.global_summary

    def test_display_json_lines(self, ladder, console):
        controller = LifecycleController(
            ExorcismConfig(formats=("txt",), log_format="json"),
            ladder,
            display=Display(log_format="json", file=console),
        )
        controller.run()
        events = [json.loads(line)["event"] for line in console.getvalue().splitlines()]
        assert events[0] == "run_started"
        assert "module_validated" in events
        assert events[-1] == "pass_complete"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.mark.usefixtures("reset_logging")
class TestCli:
    def test_ideal_ladder_exits_zero(self, ladder, monkeypatch):
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--format", "txt"])
        assert result.exit_code == 0, result.output
        assert len(_report_files(ladder, "before")) == 1
        assert len(_report_files(ladder, "after")) == 1

    def test_prompt_answered_on_stdin(self, ladder, module_dir, monkeypatch):
        (module_dir / "notes.txt").write_text("x")
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--format", "txt"], input="y\n")
        assert result.exit_code == 0, result.output
        assert "Delete these 1 files?" in result.output
        assert not (module_dir / "notes.txt").exists()

    def test_prompt_declined(self, ladder, module_dir, monkeypatch):
        (module_dir / "notes.txt").write_text("x")
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--format", "txt"], input="n\n")
        assert result.exit_code == 1
        assert (module_dir / "notes.txt").exists()

    def test_yes_flag(self, ladder, module_dir, monkeypatch):
        (module_dir / "notes.txt").write_text("x")
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--yes", "--format", "txt"])
        assert result.exit_code == 0, result.output
        assert not (module_dir / "notes.txt").exists()

    def test_output_dir(self, ladder, tmp_path, monkeypatch):
        out = tmp_path / "reports"
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--output-dir", str(out), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert len(list(out.glob("ExorcismReport_L01_*_before.json"))) == 1
        assert _report_files(ladder, "before") == []

    def test_empty_directory_exits_one(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert list(tmp_path.iterdir()) == []

    def test_unreadable_workdir_exits_two(self, ladder, monkeypatch):
        def refuse(directory):
            raise PermissionError(13, "Permission denied", str(directory))

        monkeypatch.chdir(ladder)
        monkeypatch.setattr("exorcism.lifecycle.fsutils.list_subdirectories", refuse)
        result = CliRunner().invoke(cli, ["--format", "txt"])
        assert result.exit_code == 2
        assert "Cannot read working directory" in result.output
        assert _report_files(ladder, "before") == []

    def test_missing_workdir_exits_two(self, monkeypatch):
        def gone(cls):
            raise FileNotFoundError(errno.ENOENT, "No such file or directory")

        monkeypatch.setattr(Path, "cwd", classmethod(gone))
        result = CliRunner().invoke(cli, ["--format", "txt"])
        assert result.exit_code == 2
        assert "Cannot resolve working directory" in result.output

    def test_log_file(self, ladder, tmp_path, monkeypatch):
        log_file = tmp_path / "run.log"
        monkeypatch.chdir(ladder)
        result = CliRunner().invoke(cli, ["--format", "txt", "--log-file", str(log_file), "-v"])
        assert result.exit_code == 0, result.output
        logging.shutdown()
        assert "exorcism.lifecycle" in log_file.read_text(encoding="utf-8")

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.3.0" in result.output

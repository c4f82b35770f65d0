from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from dbar import launcher
from dbar.slider_config import SliderConfig
from dbar.slider_controller import SliderResult, SliderStatus


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DBAR_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DBAR_SETTINGS", str(tmp_path / "missing-settings.json"))
    monkeypatch.delenv("DBAR_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DBAR_DEV_MODE", raising=False)


@pytest.fixture
def captured_run(monkeypatch):
    seen = {}

    def fake_run(config):
        seen["config"] = config
        return launcher.EXIT_OK

    monkeypatch.setattr(launcher, "run_slider", fake_run)
    return seen


def test_parser_defaults_match_config_defaults():
    args = launcher.build_parser().parse_args([])
    assert launcher.config_from_args(args) == SliderConfig()


def test_parser_accepts_negative_range_and_short_flags():
    args = launcher.build_parser().parse_args(
        ["-10", "10", "-f", "-x", "21", "-y", "30", "-i", "0.0", "-t", "bright", "-v", "-r", "16"]
    )
    config = launcher.config_from_args(args)
    assert config.start == -10.0
    assert config.end == 10.0
    assert config.floating is True
    assert config.width == 21
    assert config.height == 30
    assert config.initial_percent == 0.0
    assert config.title == "bright"
    assert config.show_value is True
    assert config.refresh_ms == 16


def test_parser_maps_command_and_capture_options():
    args = launcher.build_parser().parse_args(
        ["-c", "echo %v", "-C", "notify-send %v", "--no-mouse-capture", "--bg-col", "#000000", "--fg-col", "#ffffff", "--continuous"]
    )
    config = launcher.config_from_args(args)
    assert config.command == "echo %v"
    assert config.command_on_click == "notify-send %v"
    assert config.capture_mouse is False
    assert config.bg_color == "#000000"
    assert config.fg_color == "#ffffff"
    assert config.continuous is True


@pytest.mark.parametrize(
    "argv",
    [
        ["10", "5"],
        ["5", "5"],
        ["-x", "1"],
        ["-y", "0"],
        ["--bg-col", "blue"],
        ["--fg-col", "#12345"],
        ["-i", "2"],
        ["-r", "0"],
        ["0", "inf"],
        ["nan", "1"],
        ["--", "-1e308", "1e308"],
    ],
)
def test_main_rejects_invalid_configuration_before_opening_window(argv, captured_run, capsys):
    with pytest.raises(SystemExit) as excinfo:
        launcher.main(argv)
    assert excinfo.value.code == launcher.EXIT_USAGE
    assert "config" not in captured_run
    assert "dbar: error:" in capsys.readouterr().err


def test_main_runs_slider_with_parsed_config(captured_run):
    assert launcher.main(["0", "1", "--floating"]) == launcher.EXIT_OK
    config = captured_run["config"]
    assert config.end == 1.0
    assert config.floating is True


def test_settings_file_supplies_defaults_and_cli_overrides(tmp_path, captured_run):
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps({"width": 800, "fg_color": "#ff0000", "capture_mouse": False, "title": "from-file"}),
        encoding="utf-8",
    )
    launcher.main(["--settings", str(settings), "--title", "from-cli"])
    config = captured_run["config"]
    assert config.width == 800
    assert config.fg_color == "#ff0000"
    assert config.capture_mouse is False
    assert config.title == "from-cli"


def test_settings_file_with_bad_types_is_a_usage_error(tmp_path, captured_run):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"width": "wide"}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        launcher.main(["--settings", str(settings)])
    assert excinfo.value.code == launcher.EXIT_USAGE


def test_settings_file_string_switches_are_parsed_not_truthy(tmp_path, captured_run):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"capture_mouse": "false", "floating": "true"}), encoding="utf-8")
    launcher.main(["--settings", str(settings)])
    config = captured_run["config"]
    assert config.capture_mouse is False
    assert config.floating is True


def test_settings_file_with_unparseable_switch_is_a_usage_error(tmp_path, captured_run, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"show_value": "maybe"}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        launcher.main(["--settings", str(settings)])
    assert excinfo.value.code == launcher.EXIT_USAGE
    assert "config" not in captured_run
    assert "show_value" in capsys.readouterr().err


def test_resolve_settings_path_prefers_flag(tmp_path):
    target = tmp_path / "a.json"
    assert launcher.resolve_settings_path(["--settings", str(target), "5"]) == target
    assert launcher.resolve_settings_path([]) == tmp_path / "missing-settings.json"


class _FakeApp:
    def __init__(self) -> None:
        self.exec_calls = 0

    def exec(self) -> int:
        self.exec_calls += 1
        return 0


class _FakeWindow:
    def __init__(self, result):
        self.presented = False
        self.controller = SimpleNamespace(result=result)

    def present(self) -> None:
        self.presented = True


@pytest.fixture
def fake_app(monkeypatch):
    app = _FakeApp()
    monkeypatch.setattr(launcher, "QApplication", SimpleNamespace(instance=lambda: app))
    return app


def test_run_slider_confirmed_exit_code(fake_app):
    windows = []

    def factory(config):
        window = _FakeWindow(SliderResult(SliderStatus.CONFIRMED, 42))
        windows.append(window)
        return window

    assert launcher.run_slider(SliderConfig(), window_factory=factory) == launcher.EXIT_OK
    assert windows[0].presented is True
    assert fake_app.exec_calls == 1


@pytest.mark.parametrize("result", [SliderResult(SliderStatus.CANCELLED), None])
def test_run_slider_cancelled_exit_code(fake_app, result):
    code = launcher.run_slider(SliderConfig(), window_factory=lambda config: _FakeWindow(result))
    assert code == launcher.EXIT_CANCELLED


def test_run_slider_reports_window_failure(fake_app, capsys):
    def factory(config):
        raise RuntimeError("no display")

    assert launcher.run_slider(SliderConfig(), window_factory=factory) == launcher.EXIT_WINDOW_ERROR
    captured = capsys.readouterr()
    assert "no display" in captured.err
    assert captured.out == ""
    assert fake_app.exec_calls == 0

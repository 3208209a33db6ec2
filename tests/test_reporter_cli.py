import importlib
import json
import logging

import matplotlib
import numpy as np
import pandas as pd
import pytest

from mobidlsim import cli, plotting
from mobidlsim.batch import run_batch
from mobidlsim.config import load_scenario, with_overrides
from mobidlsim.plotting import plot_batch
from mobidlsim.reporter import FrameReporter, LoggingReporter, MultiReporter


def test_logging_reporter_traces_runs_and_summary(caplog):
    logger = logging.getLogger("mobidlsim.test_reporter")
    config = with_overrides(load_scenario("scenario_a"), iterations=5)
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        run_batch(config, np.random.default_rng(1), LoggingReporter(logger, log_steps=True))
    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("Iteration 1 | session 150.00 s") for m in messages)
    assert any(m.startswith("State 1:") for m in messages)
    assert any("Deadline miss" in m for m in messages)
    assert any("flagged for bandwidth" in m for m in messages)


def test_multi_reporter_fans_out():
    frames_a, frames_b = FrameReporter(), FrameReporter()
    config = with_overrides(load_scenario("scenario_a"), iterations=4)
    run_batch(config, np.random.default_rng(2), MultiReporter(frames_a, None, frames_b))
    assert frames_a.runs_frame().equals(frames_b.runs_frame())


def test_plot_batch_writes_png(tmp_path):
    frames = FrameReporter()
    config = with_overrides(load_scenario("scenario_a"), iterations=30)
    summary = run_batch(config, np.random.default_rng(3), frames)
    out = plot_batch(frames.runs_frame(), summary, tmp_path / "fig" / "batch.png")
    assert out.exists()
    assert out.stat().st_size > 0


def test_plotting_import_leaves_backend_alone(monkeypatch):
    calls = []
    monkeypatch.setattr(matplotlib, "use", lambda *args, **kwargs: calls.append(args))
    importlib.reload(plotting)
    assert calls == []


def test_cli_selects_agg_backend_only_for_plots(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(matplotlib, "use", lambda *args, **kwargs: calls.append(args))
    cli.main(["--scenario", "scenario_a", "--iterations", "5", "--seed", "1", "--out", str(tmp_path / "a"), "--quiet"])
    assert calls == []
    cli.main(["--scenario", "scenario_a", "--iterations", "5", "--seed", "1", "--out", str(tmp_path / "b"), "--plot", "--quiet"])
    assert calls == [("Agg",)]
    assert (tmp_path / "b" / "figures" / "remaining_payload.png").exists()


def test_cli_exports_artifacts(tmp_path):
    out_dir = tmp_path / "out"
    code = cli.main(
        [
            "--scenario",
            "scenario_a",
            "--iterations",
            "20",
            "--seed",
            "5",
            "--out",
            str(out_dir),
            "--steps",
            "--plot",
            "--log-file",
            "--quiet",
        ]
    )
    assert code == 0
    runs = pd.read_csv(out_dir / "csv" / "runs.csv")
    assert len(runs) == 20
    assert (out_dir / "csv" / "steps.csv").exists()
    assert (out_dir / "figures" / "remaining_payload.png").exists()
    assert list((out_dir / "logs").glob("batch_*.log"))
    payload = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
    assert payload["scenario"] == "scenario_a"
    assert payload["seed"] == 5
    assert payload["summary"]["iterations"] == 20


def test_cli_is_reproducible_with_seed(tmp_path):
    for name in ("a", "b"):
        cli.main(["--scenario", "exponential_session", "--iterations", "50", "--seed", "42", "--out", str(tmp_path / name), "--quiet"])
    first = json.loads((tmp_path / "a" / "summary.json").read_text(encoding="utf-8"))
    second = json.loads((tmp_path / "b" / "summary.json").read_text(encoding="utf-8"))
    assert first == second


def test_cli_rejects_unknown_scenario(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--scenario", "nope"])
    assert excinfo.value.code == 2


def test_cli_rejects_invalid_override():
    with pytest.raises(SystemExit):
        cli.main(["--scenario", "scenario_a", "--iterations", "0"])


def test_cli_plot_requires_out():
    with pytest.raises(SystemExit):
        cli.main(["--plot"])

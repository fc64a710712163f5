import json

from slimefield.run import main, run_simulation


def test_run_writes_snapshots_and_summary(make_cfg, tmp_path, capsys):
    cfg = make_cfg(total_ticks=20, snapshot_interval=10, output_dir=str(tmp_path))
    world = run_simulation(cfg)
    assert world.timestep == 20
    assert (tmp_path / "snapshot_000010.json").exists()
    assert (tmp_path / "snapshot_000020.json").exists()
    summary = json.loads((tmp_path / "run_summary.json").read_text())
    assert len(summary["stats_history"]) == 20
    assert summary["violations"] == []
    assert summary["config"]["width"] == 24
    snap = json.loads((tmp_path / "snapshot_000010.json").read_text())
    assert snap["t"] == 10
    assert len(snap["colonies"]) == snap["stats"]["colonies"]
    assert "t=   10" in capsys.readouterr().out


def test_cli(tmp_path):
    main(["--seed", "abc", "--width", "20", "--height", "12", "--ticks", "5",
          "--output", str(tmp_path)])
    summary = json.loads((tmp_path / "run_summary.json").read_text())
    assert summary["config"]["random_seed"] == "abc"
    assert summary["config"]["height"] == 12
    assert len(summary["stats_history"]) == 5

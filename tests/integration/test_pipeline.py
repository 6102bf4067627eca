import json

import pytest

from backpropnet.config import TrainingConfig, load_config, preset_config, presets
from backpropnet.core.types import TrainingStatus
from backpropnet.data.dataset import Dataset, make_xor_dataset
from backpropnet.training.pipelines import build_network, run_pipeline


def test_pipeline_writes_metrics_for_every_attempt(tmp_path):
    run_dir = tmp_path / "run"
    config = preset_config(
        "xor", run_dir=str(run_dir), max_epochs=5, max_error=0.0, max_attempts=2
    )
    result = run_pipeline(config, make_xor_dataset())

    assert result.status is TrainingStatus.FAILED_MAX_EPOCHS
    records = [json.loads(line) for line in (run_dir / "metrics.jsonl").read_text().splitlines()]
    assert len(records) == 14
    assert {r["attempt"] for r in records} == {0, 1}
    assert all(r["seed"] == 0 for r in records)
    csv_lines = (run_dir / "metrics.csv").read_text().splitlines()
    assert csv_lines[0] == "attempt,control_error,epoch,slope,train_error"
    assert len(csv_lines) == 15
    summary = json.loads((run_dir / "result.json").read_text())
    assert summary["attempts"] == 2
    assert summary["status"] == "failed-max-epochs"


def test_pipeline_is_deterministic(tmp_path):
    config = {**presets()["xor"], "max_epochs": 30, "max_error": 0.0, "max_attempts": 1}
    first = run_pipeline(config, make_xor_dataset())
    second = run_pipeline(config, make_xor_dataset())
    assert first == second


def test_pipeline_stops_retrying_after_success():
    config = preset_config("xor", max_error=2.0)
    result = run_pipeline(config, make_xor_dataset())
    assert result.success
    assert result.epochs == 1


def test_pipeline_forwards_control_set():
    control = Dataset(3, 1)
    control.add((1, 1, 1), (-1,), "ctl")
    config = preset_config("xor", max_epochs=2, max_error=0.0, max_attempts=1)
    result = run_pipeline(config, make_xor_dataset(), control)
    assert result.control_error != 1.0


def test_pipeline_reuses_given_network_and_detaches_sinks(tmp_path):
    config = preset_config("xor", max_epochs=2, max_error=0.0, max_attempts=1)
    network = build_network(config)
    network.add_training_example((1, -1, 1), (1,), "only")
    config.run_dir = str(tmp_path / "run")
    result = run_pipeline(config, network=network)
    assert network.callbacks == []
    assert network.get_result() == result
    assert network.get_training_ids() == ["only"]


def test_load_config_json_and_yaml_with_preset(tmp_path):
    json_path = tmp_path / "run.json"
    json_path.write_text(json.dumps({"preset": "xor", "max_epochs": 20}))
    config = load_config(json_path)
    assert config.topology == [3, 4, 1]
    assert config.max_epochs == 20
    assert config.learning_rate == 0.1

    yaml_path = tmp_path / "run.yaml"
    yaml_path.write_text(
        "topology: [2, 3, 1]\nlearning_rate: [0.2, 0.1]\nmomentum_cache: per_edge\n"
    )
    config = load_config(yaml_path, overrides={"seed": 4})
    assert config.learning_rate == [0.2, 0.1]
    assert config.momentum_cache == "per_edge"
    assert config.seed == 4
    network = build_network(config)
    assert network.get_learning_rate(1) == 0.1
    assert network.topology == (2, 3, 1)


def test_config_errors(tmp_path):
    bad = tmp_path / "run.json"
    bad.write_text(json.dumps({"epochs": 3}))
    with pytest.raises(KeyError):
        load_config(bad)
    with pytest.raises(ValueError):
        load_config(tmp_path / "run.toml")
    with pytest.raises(KeyError):
        preset_config("no-such-preset")
    with pytest.raises(ValueError):
        TrainingConfig(max_attempts=0)


def test_pipeline_raises_when_training_leaves_no_result(monkeypatch):
    network = build_network(preset_config("xor", max_attempts=1))
    network.add_training_example((1, 1, 1), (-1,))
    monkeypatch.setattr(network, "train", lambda max_epochs, max_error: False)
    with pytest.raises(RuntimeError, match="without a result"):
        run_pipeline(preset_config("xor", max_attempts=1), network=network)

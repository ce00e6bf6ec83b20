import pytest

from src.config.simulation_config import DEFAULT_CONFIG, InstrumentationConfig, load_config


def test_defaults():
    assert DEFAULT_CONFIG.instrumentation.window_size == 300.0
    assert DEFAULT_CONFIG.instrumentation.log_dir == "logs"
    assert str(InstrumentationConfig().log_path_for(7)).endswith("node_7.csv")


def test_window_size_must_be_positive():
    with pytest.raises(ValueError):
        InstrumentationConfig(window_size=0)


def test_load_yaml(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(
        "num_nodes: 4\n"
        "buffer_capacity: null\n"
        "area_size: [500, 400]\n"
        "instrumentation:\n"
        "  window_size: 60\n"
        "  log_dir: out\n",
        encoding="utf-8",
    )

    config = load_config(path)
    assert config.num_nodes == 4
    assert config.buffer_capacity is None
    assert config.area_size == (500, 400)
    assert config.instrumentation.window_size == 60
    assert config.instrumentation.log_dir == "out"
    assert config.instrumentation.flood_prefix == "F"


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("instrumentation:\n  windowsize: 60\n", encoding="utf-8")

    with pytest.raises(ValueError, match="windowsize"):
        load_config(path)


def test_command_line_overrides(tmp_path):
    from simulation import build_config, parse_args

    args = parse_args(["--window-size", "120", "--log-dir", str(tmp_path), "--nodes", "3", "--sim-time", "600"])
    config = build_config(args)

    assert config.instrumentation.window_size == 120
    assert config.instrumentation.log_dir == str(tmp_path)
    assert config.num_nodes == 3
    assert config.sim_time == 600
    assert config.seed == DEFAULT_CONFIG.seed

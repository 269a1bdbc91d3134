import pytest

from mergegrid.config import EngineConfig, GridSize, ValueRange
from mergegrid.errors import ConfigurationError


def test_defaults():
    config = EngineConfig()
    assert (config.grid_size.rows, config.grid_size.cols) == (6, 5)
    assert (config.value_range.min, config.value_range.max, config.value_range.increment_power) == (1, 32, 2)
    assert config.hit_box_scale == 0.8
    assert config.history_depth == 10


def test_legal_values_follow_geometric_progression():
    assert ValueRange(min=2, max=16, increment_power=2).legal_values() == [2, 4, 8, 16]
    assert ValueRange(min=3, max=100, increment_power=3).legal_values() == [3, 9, 27, 81]
    assert ValueRange(min=5, max=5, increment_power=4).legal_values() == [5]
    assert ValueRange(min=7, max=50, increment_power=1).legal_values() == [7]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min": 8, "max": 2},
        {"min": 0, "max": 2},
        {"min": 1, "max": 8, "increment_power": 0},
        {"min": 1, "max": 8, "increment_power": -2},
    ],
)
def test_invalid_value_range(kwargs):
    with pytest.raises(ConfigurationError):
        ValueRange(**kwargs)


@pytest.mark.parametrize("rows,cols", [(0, 5), (6, 0), (-1, 3)])
def test_invalid_dimensions(rows, cols):
    with pytest.raises(ConfigurationError):
        GridSize(rows=rows, cols=cols)


def test_invalid_scale_and_depth():
    with pytest.raises(ConfigurationError):
        EngineConfig(hit_box_scale=-0.5)
    with pytest.raises(ConfigurationError):
        EngineConfig(history_depth=-1)


def test_from_options_keeps_explicit_zero():
    config = EngineConfig.from_options({"hit_box_scale": 0, "history_depth": 0})
    assert config.hit_box_scale == 0
    assert config.history_depth == 0


def test_from_options_zero_min_is_rejected_not_defaulted():
    with pytest.raises(ConfigurationError):
        EngineConfig.from_options({"range": {"min": 0, "max": 8}})


def test_from_options_partial_nested_mappings():
    config = EngineConfig.from_options({"grid_size": {"rows": 3}, "range": {"max": 64}, "cols": 4})
    assert (config.grid_size.rows, config.grid_size.cols) == (3, 4)
    assert config.value_range.min == 1
    assert config.value_range.max == 64

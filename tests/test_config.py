import pytest

from boolsim import SimulationConfig, InitialValue


def test_defaults_are_valid():
    config = SimulationConfig()
    assert config.validate() == []
    assert config.sample_count == 30
    assert config.initial_value == InitialValue.RANDOM


def test_initial_value_from_string():
    assert SimulationConfig(initial_value='true').initial_value == InitialValue.TRUE
    with pytest.raises(ValueError):
        SimulationConfig(initial_value='maybe')


def test_validate_reports_problems():
    config = SimulationConfig(sim_delay=-1, sample_count=0, use_remote=True)
    issues = config.validate()
    assert len(issues) == 3
    assert any('server_url' in issue for issue in issues)


def test_server_url_not_required_for_supplied_service():
    config = SimulationConfig(guess_seed=True, use_remote=True)
    assert config.validate(require_server_url=False) == []
    assert len(config.validate()) == 1


def test_save_and_load(tmp_path):
    config = SimulationConfig(sim_delay=0.1, one_click=True, initial_value=InitialValue.FALSE,
                              server_url='http://localhost:8080', max_time_series_columns=40)
    path = tmp_path / 'configs' / 'simulation.json'
    config.save(path)
    assert SimulationConfig.load(path) == config


def test_from_dict_ignores_unknown_keys():
    config = SimulationConfig.from_dict({'sim_delay': 1.5, 'colour': 'green'})
    assert config.sim_delay == 1.5

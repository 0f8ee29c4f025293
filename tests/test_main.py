import pytest

from py_ballistictk import DEFAULT_AERO_COEFFICIENTS, create_calibration_config, synthetic_observation
from py_ballistictk.__main__ import get_arg_parser, main

HEADER = ("bullet,caliber,length_in,bc_g7,twist_in,mv_fps,range_yd,wind_0,vert_0,wind_5,vert_5,"
          "wind_10,vert_10,wind_neg5,vert_neg5,wind_neg10,vert_neg10")
ROW = "Test,308,1.2,0.243,10,2800,300,0.1,0.0,0.2,0.01,0.3,0.02,0.05,-0.01,0.0,-0.02"

SETTINGS = {
    'cTimeStep': 0.002,
    'cInitialTemperature': 1.0,
    'cCoolingRate': 0.1,
    'cMinTemperature': 0.5,
    'cTrialsPerTemperature': 1,
}

CONFIG_TOML = """
[btk.simulator]

[btk.calibration]
cTimeStep = 0.002
cInitialTemperature = 1.0
cCoolingRate = 0.1
cMinTemperature = 0.5
cTrialsPerTemperature = 1
cInitialLift = {lift_slope!r}
cInitialRestoring = {restoring_moment_slope!r}
cInitialYaw = {yaw_of_repose_scale!r}
cInitialBetaLag = {beta_lag_scale!r}
"""


def _row(observation) -> str:
    values = [observation.bullet_name, f'{observation.caliber_in * 1000.0:g}']
    values += [repr(getattr(observation, name)) for name in (
        'length_in', 'bc_g7', 'twist_in', 'mv_fps', 'range_yd',
        'wind_0', 'vert_0', 'wind_5', 'vert_5', 'wind_10', 'vert_10',
        'wind_neg5', 'vert_neg5', 'wind_neg10', 'vert_neg10')]
    return ','.join(values)


def test_arg_parser():
    argv = get_arg_parser().parse_args(['data.csv', '-s', '3', '-f', 'lift_slope', '--fix', 'beta_lag_scale'])
    assert argv.csv_file == 'data.csv'
    assert argv.seed == 3
    assert argv.fix == ['lift_slope', 'beta_lag_scale']


def test_unknown_fixed_coefficient_rejected():
    with pytest.raises(SystemExit):
        get_arg_parser().parse_args(['data.csv', '--fix', 'drag'])


def test_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.csv")]) == 1


def test_invalid_observations(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("\n".join([HEADER, ROW.replace(",0.01,", ",-0.01,", 1)]) + "\n")
    assert main([str(path)]) == 1


def test_calibrates_exact_observations(tmp_path, capsys, observation, restore_defaults):
    # Readings generated with the starting coefficients leave nothing to fit
    synthetic = synthetic_observation(observation, DEFAULT_AERO_COEFFICIENTS, create_calibration_config(SETTINGS))
    csv_path = tmp_path / "exact.csv"
    csv_path.write_text("\n".join([HEADER, _row(synthetic)]) + "\n")
    config_path = tmp_path / "fit.toml"
    config_path.write_text(CONFIG_TOML.format(**DEFAULT_AERO_COEFFICIENTS._asdict()))

    assert main([str(csv_path), '--config', str(config_path), '--seed', '1']) == 0
    out = capsys.readouterr().out
    assert "Final RMSE:   0.0000 mrad" in out
    assert "beta_lag_scale = 0.670554" in out
    # All four coefficients free: lift and yaw scale only act through their product
    assert "Warning: ill-conditioned fit" in out


def test_unreadable_config(tmp_path, restore_defaults):
    csv_path = tmp_path / "data.csv"
    csv_path.write_text("\n".join([HEADER, ROW]) + "\n")
    config_path = tmp_path / "broken.toml"
    config_path.write_text("[btk.calibration\ncSeed = 1\n")
    assert main([str(csv_path), '--config', str(config_path)]) == 1


def test_unknown_config_key(tmp_path, restore_defaults):
    csv_path = tmp_path / "data.csv"
    csv_path.write_text("\n".join([HEADER, ROW]) + "\n")
    config_path = tmp_path / "typo.toml"
    config_path.write_text("[btk.simulator]\n\n[btk.calibration]\ncSeeed = 1\n")
    assert main([str(csv_path), '--config', str(config_path)]) == 1

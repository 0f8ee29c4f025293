import pytest

from py_ballistictk import basicConfig, create_calibration_config, create_simulator_config
from py_ballistictk import config as btk_config

TOML = """
[btk.simulator]
cTimeStep = 0.0005
cZeroMaxIterations = 30

[btk.calibration]
cSeed = 7
cLiftBounds = [0.6, 2.5]
cTrialsPerTemperature = 10
"""


class TestCreateConfig:

    def test_simulator_defaults(self):
        config = create_simulator_config()
        assert config.cTimeStep == 0.001
        assert config.cGravityConstant == pytest.approx(9.80665)
        assert config.cZeroDamping == 0.5

    def test_simulator_overrides(self):
        config = create_simulator_config({'cTimeStep': 0.002, 'cMaxTime': 10.0})
        assert config.cTimeStep == 0.002
        assert config.cMaxTime == 10.0
        assert config.cZeroTolerance == 0.001

    def test_unknown_key(self):
        with pytest.raises(KeyError, match="cTimestep"):
            create_simulator_config({'cTimestep': 0.002})  # type: ignore[typeddict-unknown-key]
        with pytest.raises(KeyError):
            create_calibration_config({'cCooling': 0.5})  # type: ignore[typeddict-unknown-key]

    def test_calibration_defaults(self):
        config = create_calibration_config()
        assert config.cZeroRangeYards == 100.0
        assert config.cScopeHeightInches == 2.0
        assert config.cZeroTolerance == 1e-7
        assert config.cSeed is None

    def test_bounds_from_list(self):
        config = create_calibration_config({'cYawBounds': [0.1, 0.4]})
        assert config.cYawBounds == (0.1, 0.4)

    @pytest.mark.parametrize("bounds", [(1.0, 0.5), (0.2, 0.2)])
    def test_invalid_bounds(self, bounds):
        with pytest.raises(ValueError, match="cLiftBounds"):
            create_calibration_config({'cLiftBounds': bounds})


class TestConfigLoader:

    def test_load_file(self, tmp_path, restore_defaults):
        path = tmp_path / "btk.toml"
        path.write_text(TOML)
        basicConfig(str(path))

        assert btk_config.DEFAULT_SIMULATOR_CONFIG.cTimeStep == 0.0005
        assert create_simulator_config().cZeroMaxIterations == 30
        calibration = create_calibration_config()
        assert calibration.cSeed == 7
        assert calibration.cLiftBounds == (0.6, 2.5)
        assert calibration.cTrialsPerTemperature == 10
        assert calibration.cCoolingRate == 0.8

    def test_reload_starts_from_builtin_defaults(self, tmp_path, restore_defaults):
        path = tmp_path / "btk.toml"
        path.write_text(TOML)
        basicConfig(str(path))
        path.write_text("[btk.simulator]\ncMaxTime = 30.0\n\n[btk.calibration]\n")
        basicConfig(str(path))
        assert create_simulator_config().cTimeStep == 0.001
        assert create_simulator_config().cMaxTime == 30.0
        assert create_calibration_config().cSeed is None

    def test_discovered_from_working_directory(self, tmp_path, monkeypatch, restore_defaults):
        (tmp_path / ".btk.toml").write_text(TOML)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        basicConfig()
        assert create_simulator_config().cTimeStep == 0.0005

    def test_missing_section_keeps_defaults(self, tmp_path, restore_defaults):
        path = tmp_path / "btk.toml"
        path.write_text("[btk.simulator]\ncTimeStep = 0.004\n")
        basicConfig(str(path), suppress_warnings=True)
        assert create_simulator_config().cTimeStep == 0.004
        assert create_calibration_config().cTrialsPerTemperature == 50

    def test_unknown_key_in_file(self, tmp_path, restore_defaults):
        path = tmp_path / "btk.toml"
        path.write_text("[btk.simulator]\ncTimestep = 0.004\n")
        with pytest.raises(KeyError):
            basicConfig(str(path))

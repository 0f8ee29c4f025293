import logging

import pytest

from py_ballistictk import Atmosphere, DragFunction, Observation, Projectile, Simulator, Vector
from py_ballistictk.config import set_default_calibration_config, set_default_simulator_config
from py_ballistictk.logger import logger

logger.setLevel(logging.DEBUG)

MUZZLE_VELOCITY = 800.0  # m/s
TWIST = 0.254  # m/turn, 1:10" right hand


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: runs a full calibration (deselect with '-m \"not slow\"')")


@pytest.fixture
def bullet() -> Projectile:
    """.308 175gr-class boat tail."""
    return Projectile(mass=0.0113, diameter=0.00782, length=0.0325, bc=0.243, drag_function=DragFunction.G7)


@pytest.fixture
def spin_rate() -> float:
    return Projectile.compute_spin_rate_from_twist(MUZZLE_VELOCITY, TWIST)


@pytest.fixture
def simulator(bullet, spin_rate) -> Simulator:
    """Configured simulator, bore along the x-axis, not zeroed."""
    sim = Simulator()
    sim.set_atmosphere(Atmosphere.standard())
    sim.set_initial_bullet(bullet.in_flight(Vector(MUZZLE_VELOCITY, 0.0, 0.0), spin_rate))
    return sim


@pytest.fixture
def observation() -> Observation:
    return Observation.from_row(
        "Test,308,1.2,0.243,10,2800,300,0.1,0.0,0.2,0.01,0.3,0.02,0.05,-0.01,0.0,-0.02".split(','))


@pytest.fixture
def restore_defaults():
    yield
    set_default_simulator_config()
    set_default_calibration_config()

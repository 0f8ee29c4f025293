import pytest

from py_ballistictk.exceptions import (AtmosphereError, CalibrationCancelledError, CalibrationError,
                                       ConfigurationError, ObservationError, SingularMatrixError,
                                       SolverRuntimeError, ZeroFindingError)


def test_zero_finding_error_message_and_attrs():
    zfe = ZeroFindingError(0.5, 7, 0.0021)
    assert "after 7 iterations" in str(zfe)
    assert "0.500000 m" in str(zfe)
    assert zfe.iterations_count == 7
    assert zfe.zero_finding_error == 0.5
    assert zfe.last_barrel_elevation == 0.0021


def test_observation_error_prefix():
    assert str(ObservationError("bad")) == "bad"
    assert str(ObservationError("bad", "SMK")) == "SMK: bad"
    err = ObservationError("bad", "SMK", 600.0)
    assert str(err) == "SMK @ 600 yards: bad"
    assert err.bullet_name == "SMK"
    assert err.range_yd == 600.0


def test_singular_matrix_error():
    err = SingularMatrixError(2, 1e-15)
    assert err.column == 2
    assert "column 2" in str(err)


@pytest.mark.parametrize("exc_type, base", [
    (AtmosphereError, ValueError),
    (ObservationError, ValueError),
    (ConfigurationError, RuntimeError),
    (ZeroFindingError, SolverRuntimeError),
    (CalibrationError, SolverRuntimeError),
    (SingularMatrixError, CalibrationError),
    (CalibrationCancelledError, CalibrationError),
])
def test_hierarchy(exc_type, base):
    assert issubclass(exc_type, base)

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import astropy.units as u
from astropy.io import fits

from spexfit.datasets.ogip import read_background, read_paths_from_spectrum, read_spectrum
from spexfit.datasets.spectrum import ErrorStatistics


def write_pha(path, columns, **header):
    """Write a minimal type-I PHA file with the given columns and SPECTRUM header keywords."""
    cols = [fits.Column(name=name, format=fmt, array=np.asarray(array)) for name, fmt, array in columns]
    hdu = fits.BinTableHDU.from_columns(cols, name="SPECTRUM")
    for key, value in header.items():
        hdu.header[key] = value
    fits.HDUList([fits.PrimaryHDU(), hdu]).writeto(path)
    return path


@pytest.fixture
def counts_pha(tmp_path):
    channels = np.arange(1, 6)
    return write_pha(tmp_path / "src.pha",
                     [("CHANNEL", "J", channels),
                      ("COUNTS", "J", [4, 9, 16, 0, 1]),
                      ("QUALITY", "I", [0, 0, 0, 0, 5]),
                      ("GROUPING", "I", [1, -1, 1, -1, -1])],
                     TELESCOP="TEST", INSTRUME="DET1", EXPOSURE=100.0, BACKSCAL=0.5,
                     AREASCAL=1.0, POISSERR=True)


def test_read_counts(counts_pha):
    result = read_spectrum(counts_pha)
    spec = result.spectrum
    assert not result.degraded
    assert spec.units == u.ct
    assert spec.telescope_name == "TEST"
    assert spec.instrument == "DET1"
    assert spec.exposure_time == 100.0
    assert spec.background_scale == 0.5
    assert spec.systematic_error == 0.0
    assert_array_equal(spec.channels, [1, 2, 3, 4, 5])
    assert_array_equal(spec.quality, [0, 0, 0, 0, 5])
    assert_array_equal(spec.grouping, [1, 0, 1, 0, 0])
    assert spec.error_statistics is ErrorStatistics.POISSON
    assert_allclose(spec.errors, [2.0, 3.0, 4.0, 0.0, 1.0])


def test_read_rate_with_stat_err(tmp_path, caplog):
    path = write_pha(tmp_path / "rate.pha",
                     [("CHANNEL", "J", [1, 2, 3]),
                      ("RATE", "E", [0.5, 1.0, 1.5]),
                      ("STAT_ERR", "E", [0.1, 0.2, 0.3])],
                     TELESCOP="TEST", INSTRUME="DET1", TELAPSE=20.0, POISSERR="T")
    result = read_spectrum(path)
    spec = result.spectrum
    assert spec.units == u.ct / u.s
    assert spec.exposure_time == 20.0
    assert spec.error_statistics is ErrorStatistics.NUMERIC
    assert_allclose(spec.errors, [0.1, 0.2, 0.3], rtol=1e-6)
    # columns that are not present get their defaults
    assert_array_equal(spec.quality, [0, 0, 0])
    assert_array_equal(spec.grouping, [1, 1, 1])
    assert "Using STAT_ERR" in caplog.text


def test_read_unknown_errors(tmp_path, caplog):
    path = write_pha(tmp_path / "unknown.pha",
                     [("CHANNEL", "J", [1, 2]), ("COUNTS", "J", [3, 4])],
                     TSTART=10.0, TSTOP=15.0)
    result = read_spectrum(path)
    assert result.degraded
    assert any("Unknown error statistics" in note for note in result.notes)
    assert result.spectrum.error_statistics is ErrorStatistics.UNKNOWN
    assert_array_equal(result.spectrum.errors, [0.0, 0.0])
    assert result.spectrum.exposure_time == 5.0
    assert "Unknown error statistics" in caplog.text


def test_read_missing_exposure(tmp_path):
    path = write_pha(tmp_path / "noexp.pha", [("CHANNEL", "J", [1]), ("COUNTS", "J", [3])], POISSERR=True)
    result = read_spectrum(path)
    assert result.spectrum.exposure_time == 0.0
    assert result.notes == ["Cannot find or infer exposure time."]


def test_read_background(counts_pha):
    result = read_background(counts_pha)
    assert len(result.spectrum) == 5


def test_read_paths_from_spectrum(tmp_path, caplog):
    (tmp_path / "back.pha").touch()
    path = write_pha(tmp_path / "src.pha", [("CHANNEL", "J", [1]), ("COUNTS", "J", [3])],
                     BACKFILE="back.pha", RESPFILE="resp.rmf", ANCRFILE="none")
    background, response, ancillary = read_paths_from_spectrum(path)
    assert background == tmp_path / "back.pha"
    assert response == tmp_path / "resp.rmf"
    assert ancillary is None
    assert "resp.rmf" in caplog.text

"""
Read OGIP type-I PHA spectra into `~spexfit.datasets.spectrum.Spectrum` objects.

FITS decoding is left to `astropy.io.fits`; this module only maps the
OGIP keywords and columns onto a spectrum and fills in defaults for anything
that is missing.
"""

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from astropy.io import fits

from spexfit.constants import COUNT_RATE, COUNTS, GOOD_QUALITY, NEW_GROUP
from spexfit.datasets.grouping import count_error
from spexfit.datasets.spectrum import ErrorStatistics, Spectrum
from spexfit.logging import get_logger

logger = get_logger(__name__)

__all__ = ["LoadResult", "read_spectrum", "read_background", "read_paths_from_spectrum"]


@dataclass
class LoadResult:
    """
    A loaded spectrum and any notes about defaults that had to be assumed.

    A result with notes is still usable, it is up to the caller whether a
    degraded spectrum is acceptable.
    """
    spectrum: Spectrum
    notes: list = field(default_factory=list)

    @property
    def degraded(self):
        return len(self.notes) > 0


def _note(notes, message):
    logger.warning(message)
    notes.append(message)


def _string_boolean(value, notes):
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    text = str(value).strip().upper()
    if text in ("T", "TRUE"):
        return True
    if text in ("F", "FALSE"):
        return False
    _note(notes, f"Unknown boolean string: {value}")
    return False


def _exposure_time(header, notes):
    if "EXPOSURE" in header:
        return float(header["EXPOSURE"])
    if "TELAPSE" in header:
        return float(header["TELAPSE"])
    if "TSTART" in header and "TSTOP" in header:
        return float(header["TSTOP"]) - float(header["TSTART"])
    _note(notes, "Cannot find or infer exposure time.")
    return 0.0


def _column_names(data):
    return {name.upper() for name in data.columns.names}


def read_spectrum(file, dtype=float):
    """
    Read a .pha file.

    Parameters
    ----------
    file : `str`, `file-like` or `pathlib.Path`
        A .pha file (see `~astropy.io.fits.open` for details).
    dtype : `type`, optional
        Floating point type of the data and errors.

    Returns
    -------
    `LoadResult`
        The spectrum and the notes on any assumed defaults.

    Notes
    -----
    Count rates are read from the ``RATE`` column if there is one, else
    counts from ``COUNTS``. Errors come from ``STAT_ERR`` if present, else
    they are Poisson errors if ``POISSERR`` is set, else they are zero and
    the error statistics unknown.
    """
    notes = []
    with fits.open(file) as hdul:
        header = hdul[1].header
        data = hdul[1].data
        columns = _column_names(data)

        is_poisson = _string_boolean(header.get("POISSERR", False), notes)
        instrument = str(header.get("INSTRUME", "")).strip()
        telescope = str(header.get("TELESCOP", "")).strip()
        exposure_time = _exposure_time(header, notes)
        background_scale = float(header.get("BACKSCAL", 1.0))
        area_scale = float(header.get("AREASCAL", 1.0))
        systematic_error = float(header.get("SYS_ERR", 0.0))

        channels = np.array(data["CHANNEL"], dtype=int)
        n = channels.shape[0]
        quality = (np.array(data["QUALITY"], dtype=int) if "QUALITY" in columns
                   else np.full(n, GOOD_QUALITY, dtype=int))
        grouping = (np.array(data["GROUPING"], dtype=int) if "GROUPING" in columns
                    else np.full(n, NEW_GROUP, dtype=int))

        if "RATE" in columns:
            units, values = COUNT_RATE, np.array(data["RATE"], dtype=dtype)
        else:
            units, values = COUNTS, np.array(data["COUNTS"], dtype=dtype)

        if "STAT_ERR" in columns:
            if is_poisson:
                logger.warning("Both STAT_ERR column present and POISSERR flag set. Using STAT_ERR.")
            statistics, errors = ErrorStatistics.NUMERIC, np.array(data["STAT_ERR"], dtype=dtype)
        elif is_poisson:
            statistics, errors = ErrorStatistics.POISSON, count_error(values, 1.0).astype(dtype)
        else:
            _note(notes, "Unknown error statistics. Setting zero for all.")
            statistics, errors = ErrorStatistics.UNKNOWN, np.zeros_like(values)

    # OGIP grouping uses -1 for "continue group"
    grouping[grouping != NEW_GROUP] = 0

    spectrum = Spectrum(channels=channels, quality=quality, grouping=grouping, data=values, units=units,
                        exposure_time=exposure_time, background_scale=background_scale,
                        area_scale=area_scale, error_statistics=statistics, errors=errors,
                        systematic_error=systematic_error, telescope_name=telescope,
                        instrument=instrument, meta={"file": str(file)})
    return LoadResult(spectrum, notes)


def read_background(file, dtype=float):
    """
    Read a background .pha file, see `read_spectrum`.
    """
    return read_spectrum(file, dtype=dtype)


def _resolve(header, keyword, parent):
    name = header.get(keyword)
    if name is None:
        return None
    name = str(name).strip()
    if name == "" or name.lower() == "none":
        return None
    path = parent / name
    if not path.exists():
        logger.warning(f"Missing! Could not find file '{path}' named by {keyword}.")
    return path


def read_paths_from_spectrum(file):
    """
    Find the background, response and ancillary files a .pha file refers to.

    Relative names are resolved against the directory of ``file``.

    Parameters
    ----------
    file : `str` or `pathlib.Path`

    Returns
    -------
    `tuple`
        The ``BACKFILE``, ``RESPFILE`` and ``ANCRFILE`` paths as
        `pathlib.Path`, or `None` for each one that is not set.
    """
    file = Path(file)
    header = fits.getheader(file, ext=1)
    parent = file.parent
    return tuple(_resolve(header, keyword, parent) for keyword in ("BACKFILE", "RESPFILE", "ANCRFILE"))

"""
The binned spectrum of one observation and the operations that change it.

Every operation takes the spectrum, changes it in place and hands the same
object back. A spectrum should have one owner at a time; none of the
operations are atomic, so a spectrum that raised half way through an
operation should be discarded.
"""

import enum
from dataclasses import dataclass, field

import numpy as np

import astropy.units as u

from spexfit.constants import COUNT_RATE, GOOD_QUALITY, NEW_GROUP, is_count_rate, is_counts
from spexfit.datasets.grouping import GroupingIterator, count_error, regroup_array, regroup_quality
from spexfit.datasets.layouts import AbstractDataset, Layout
from spexfit.exceptions import PreconditionError, UnsupportedUnitsError
from spexfit.logging import get_logger

logger = get_logger(__name__)

__all__ = ["ErrorStatistics", "Spectrum", "regroup", "isgrouped", "resize", "drop_channels",
           "normalize", "subtract_background", "error_statistic"]


class ErrorStatistics(enum.Enum):
    """
    Where the errors of a spectrum come from.
    """
    NUMERIC = "numeric"
    POISSON = "poisson"
    GAUSSIAN = "gaussian"
    UNKNOWN = "unknown"


_PER_CHANNEL = ("channels", "quality", "grouping", "data")


@dataclass(eq=False)
class Spectrum(AbstractDataset):
    """
    Binned data of a single observation.

    Parameters
    ----------
    channels : `numpy.ndarray` of `int`
        Channel identifiers.
    quality : `numpy.ndarray` of `int`
        Quality flags, 0 is good.
    grouping : `numpy.ndarray` of `int`
        Grouping flags, 1 starts a new group and 0 continues the current one.
    data : `numpy.ndarray`
        Counts or count rates, depending on ``units``.
    units : `astropy.units.UnitBase`
        ``u.ct`` or ``u.ct / u.s``.
    exposure_time : `float`
        Exposure in seconds.
    background_scale, area_scale : `float`
        The BACKSCAL and AREASCAL normalisation factors.
    error_statistics : `ErrorStatistics`
        Origin of ``errors``.
    errors : `numpy.ndarray` or `None`
        Per-channel uncertainties, `None` when the spectrum has none.
    systematic_error : `float`
        Fractional systematic error.
    telescope_name, instrument : `str`
        Mission identifiers.

    Examples
    --------
    >>> import numpy as np
    >>> import astropy.units as u
    >>> from spexfit.datasets.spectrum import Spectrum
    >>> spec = Spectrum(channels=np.arange(1, 5), data=np.array([1., 2., 3., 4.]), units=u.ct)
    >>> len(spec)
    4
    """

    channels: np.ndarray
    data: np.ndarray
    units: u.UnitBase = u.ct
    quality: np.ndarray = None
    grouping: np.ndarray = None
    exposure_time: float = 1.0
    background_scale: float = 1.0
    area_scale: float = 1.0
    error_statistics: ErrorStatistics = ErrorStatistics.UNKNOWN
    errors: np.ndarray = None
    systematic_error: float = 0.0
    telescope_name: str = ""
    instrument: str = ""
    meta: dict = field(default_factory=dict)

    supported_layouts = frozenset({Layout.CONTIGUOUSLY_BINNED})

    def __post_init__(self):
        self.channels = np.array(self.channels, dtype=int)
        self.data = np.array(self.data, dtype=float)
        n = self.channels.shape[0]
        self.quality = (np.full(n, GOOD_QUALITY, dtype=int) if self.quality is None
                        else np.array(self.quality, dtype=int))
        self.grouping = (np.full(n, NEW_GROUP, dtype=int) if self.grouping is None
                         else np.array(self.grouping, dtype=int))
        if self.errors is not None:
            self.errors = np.array(self.errors, dtype=float)

        lengths = {name: getattr(self, name).shape[0] for name in self._per_channel_names()}
        if len(set(lengths.values())) != 1:
            raise ValueError(f"Per-channel arrays must all have the same length, got {lengths}.")
        if not np.all(np.isin(self.grouping, (0, 1))):
            raise ValueError("Grouping flags must be 0 or 1.")

    def _per_channel_names(self):
        if self.errors is None:
            return _PER_CHANNEL
        return (*_PER_CHANNEL, "errors")

    def __len__(self):
        return self.channels.shape[0]

    def _make_objective(self, layout):
        return self.data.copy()

    def _make_objective_variance(self, layout):
        if self.errors is None:
            logger.warning("Spectrum has no errors, objective variance is zero.")
            return np.zeros_like(self.data)
        return self.errors**2

    def _make_domain(self, layout):
        logger.warning("Spectrum doesn't know the energy values by default. Domain is channels. "
                       "Proceed only if you know what you are doing.")
        return np.append(self.channels, self.channels[-1] + 1).astype(float)

    def _make_domain_variance(self, layout):
        return np.zeros(len(self) + 1)

    def __str__(self):
        dmin, dmax = (np.min(self.data), np.max(self.data)) if len(self) else (np.nan, np.nan)
        num_bad = int(np.count_nonzero(self.quality != GOOD_QUALITY))
        has_bad = f"yes ({num_bad})" if num_bad > 0 else "no"
        return (f"Spectrum: {self.telescope_name}[{self.instrument}]\n"
                f"  Units                 : {self.units}\n"
                f"  . Exposure time       : {self.exposure_time}\n"
                f"  . Channels            : {len(self)}\n"
                f"  . Data (min/max)      : ({dmin:.4g}, {dmax:.4g})\n"
                f"  . Grouped             : {'yes' if isgrouped(self) else 'no'}\n"
                f"  . Bad channels        : {has_bad}\n")


def isgrouped(spectrum):
    """
    True if every channel starts its own group, i.e. there is nothing left to regroup.
    """
    return bool(np.all(spectrum.grouping == NEW_GROUP))


def error_statistic(spectrum):
    return spectrum.error_statistics


def regroup(spectrum, grouping=None):
    """
    Collapse the channels of ``spectrum`` into the groups given by ``grouping``.

    For each group the data are summed, the first channel identifier of the
    group is kept, the quality is the worst quality of the members and,
    when the spectrum has errors, the error is recomputed as the Poisson
    error of the summed counts (converted back to a rate for count rate
    spectra). Afterwards every per-channel array has one entry per group and
    the grouping is all 1s.

    Parameters
    ----------
    spectrum : `Spectrum` or `numpy.ndarray`
        The spectrum to regroup in place. A plain array is summed per group
        and the new array returned.
    grouping : array-like of `int`, optional
        Grouping flags. Defaults to ``spectrum.grouping``.

    Returns
    -------
    `Spectrum` or `numpy.ndarray`

    Raises
    ------
    `~spexfit.exceptions.UnsupportedUnitsError`
        When errors need recomputing and the spectrum is in neither counts
        nor counts / s.
    """
    if not isinstance(spectrum, Spectrum):
        if grouping is None:
            raise ValueError("Grouping flags are required to regroup a plain array.")
        return regroup_array(spectrum, grouping)

    grouping = spectrum.grouping if grouping is None else np.asarray(grouping, dtype=int)
    if grouping.shape[0] != len(spectrum):
        raise PreconditionError(f"Grouping has {grouping.shape[0]} flags, spectrum has {len(spectrum)} channels.")
    if np.all(grouping == NEW_GROUP):
        return spectrum

    groups = GroupingIterator(grouping)
    starts = np.array([start - 1 for _, start, _ in groups])
    n_channels = len(spectrum)

    spectrum.channels = spectrum.channels[starts]
    spectrum.data = regroup_array(spectrum.data, grouping)
    spectrum.quality = regroup_quality(spectrum.quality, grouping)
    if spectrum.errors is not None:
        if is_counts(spectrum.units):
            spectrum.errors = count_error(spectrum.data, 1.0)
        elif is_count_rate(spectrum.units):
            counts = spectrum.data * spectrum.exposure_time
            spectrum.errors = count_error(counts, 1.0) / spectrum.exposure_time
        else:
            raise UnsupportedUnitsError(
                spectrum.units,
                message=f"No method for grouping errors with given spectral units ({spectrum.units}).")
    spectrum.grouping = np.full(len(groups), NEW_GROUP, dtype=int)

    logger.debug(f"Regrouped {n_channels} channels into {len(groups)} groups.")
    return spectrum


def resize(spectrum, n):
    """
    Truncate every per-channel array of ``spectrum`` to its first ``n`` entries.
    """
    if n < 0 or n > len(spectrum):
        raise PreconditionError(f"Cannot resize a spectrum of {len(spectrum)} channels to {n}.")
    for name in spectrum._per_channel_names():
        setattr(spectrum, name, getattr(spectrum, name)[:n])
    return spectrum


def drop_channels(spectrum, indices):
    """
    Remove the channels at the (0-based) positions ``indices``.

    Returns
    -------
    `int`
        The number of channels removed.
    """
    indices = np.unique(np.atleast_1d(np.asarray(indices, dtype=int)))
    for name in spectrum._per_channel_names():
        setattr(spectrum, name, np.delete(getattr(spectrum, name), indices))
    return len(indices)


def normalize(spectrum):
    """
    Convert a counts spectrum to counts per second. Count rate spectra are left alone.
    """
    if is_counts(spectrum.units):
        spectrum.data = spectrum.data / spectrum.exposure_time
        if spectrum.errors is not None:
            spectrum.errors = spectrum.errors / spectrum.exposure_time
        spectrum.units = COUNT_RATE
    return spectrum


def _scaled_background(back, aB, bD, bB):
    return (bD / bB) * (back / aB)


def _subtract_background(spec, back, aD, aB, bD, bB, tD, tB):
    # result stays in counts, i.e. multiplied through by tD relative to
    # equation 2.3 of the XSPEC manual
    return (spec / aD) - (tD / tB) * _scaled_background(back, aB, bD, bB)


def _background_variance(spec_var, back_var, aD, aB, bD, bB, tD, tB):
    # each variance goes through its term of the transform, then they add in quadrature
    return (spec_var / aD) + (tD / tB) * _scaled_background(back_var, aB, bD, bB)


def subtract_background(spectrum, background):
    """
    Subtract an area and exposure normalised background from ``spectrum``.

    The source and background variances are each scaled by their term of the
    transform applied to the data and added in quadrature; the errors become
    the square root of the absolute result. This is an approximation and not
    a full propagation of the uncertainties.

    Parameters
    ----------
    spectrum : `Spectrum`
        Source spectrum in counts, modified in place.
    background : `Spectrum`
        Background spectrum in counts with the same number of channels. Read only.

    Returns
    -------
    `Spectrum`
        The same source spectrum.
    """
    if not is_counts(spectrum.units) or not is_counts(background.units):
        raise PreconditionError(f"Background subtraction needs spectra in counts, got "
                                f"{spectrum.units} and {background.units}.")
    if len(background) != len(spectrum):
        raise PreconditionError(f"Background has {len(background)} channels, spectrum has {len(spectrum)}.")
    if background.exposure_time <= 0:
        raise PreconditionError(f"Background exposure time must be > 0, got {background.exposure_time}.")

    scales = (spectrum.area_scale, background.area_scale,
              spectrum.background_scale, background.background_scale,
              spectrum.exposure_time, background.exposure_time)

    if spectrum.errors is not None:
        if background.errors is None:
            logger.warning("Background has no errors, treating its variance as zero.")
            background_variance = np.zeros_like(background.data)
        else:
            background_variance = background.errors**2
        # TODO: propagate the errors properly rather than transforming the variances
        variance = _background_variance(spectrum.errors**2, background_variance, *scales)
        spectrum.errors = np.sqrt(np.abs(variance))

    spectrum.data = _subtract_background(spectrum.data, background.data, *scales)
    return spectrum

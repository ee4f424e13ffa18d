"""
Channel grouping.

Grouping is described by a flag per channel: `~spexfit.constants.NEW_GROUP`
(1) starts a new group and `~spexfit.constants.CONTINUE_GROUP` (0) adds the
channel to the current group. The policies in this module compute such flags
from the data, `GroupingIterator` turns flags into group boundaries and
`regroup_array` / `regroup_quality` collapse arrays group by group.

The policies accumulate sequentially from the lowest channel upwards with no
look-ahead, in the same manner as ``grppha`` and ``specgroup``.
"""

import numpy as np

from spexfit.constants import CONTINUE_GROUP, GOOD_QUALITY, NEW_GROUP, is_count_rate, is_counts
from spexfit.exceptions import PreconditionError, UnsupportedUnitsError
from spexfit.logging import get_logger

logger = get_logger(__name__)

__all__ = ["GroupingIterator", "count_error", "to_counts", "regroup_array", "regroup_quality",
           "group_min_counts", "group_min_snr"]


class GroupingIterator:
    """
    Iterate over the groups described by a grouping flag array.

    Each item is a ``(group_index, start, end)`` triple, all 1-based and
    inclusive. The first channel always starts group 1, whatever its flag.
    The flags are not modified, so the iterator can be iterated as many times
    as needed.

    Parameters
    ----------
    grouping : array-like of `int`
        Flags of 1 (new group) and 0 (continue group).

    Examples
    --------
    >>> from spexfit.datasets.grouping import GroupingIterator
    >>> list(GroupingIterator([1, 0, 0, 0, 1, 0, 0, 1, 1, 0]))
    [(1, 1, 4), (2, 5, 7), (3, 8, 8), (4, 9, 10)]
    """

    def __init__(self, grouping):
        grouping = np.asarray(grouping)
        if grouping.ndim != 1 or grouping.size == 0:
            raise PreconditionError("Grouping must be a non-empty 1-D array of flags.")
        self.grouping = grouping

    def _starts(self):
        # 0-based start positions, the first channel is always a start
        later = np.flatnonzero(self.grouping[1:] == NEW_GROUP) + 1
        return np.concatenate(([0], later))

    def __iter__(self):
        starts = self._starts()
        ends = np.append(starts[1:], self.grouping.size)
        for index, (start, end) in enumerate(zip(starts, ends), start=1):
            yield index, int(start) + 1, int(end)

    def __len__(self):
        return len(self._starts())

    def slices(self):
        """
        Return the groups as 0-based `slice` objects.
        """
        return [slice(start - 1, end) for _, start, end in self]

    def __repr__(self):
        return f"GroupingIterator({self.grouping.tolist()})"


def count_error(counts, scale=1.0):
    """
    Poisson uncertainty on a number of counts.

    Parameters
    ----------
    counts : `float` or `numpy.ndarray`
        Counts.
    scale : `float`, optional
        Factor applied to the square root. Default 1.

    Returns
    -------
    `float` or `numpy.ndarray`
        ``sqrt(counts) * scale``
    """
    return np.sqrt(counts) * scale


def to_counts(values, exposure_time, units):
    """
    Convert data to counts.

    Parameters
    ----------
    values : `float` or `numpy.ndarray`
        Counts or count rates.
    exposure_time : `float`
        Exposure in seconds, used for count rates.
    units : `astropy.units.UnitBase`
        `~spexfit.constants.COUNTS` or `~spexfit.constants.COUNT_RATE`.

    Raises
    ------
    `~spexfit.exceptions.UnsupportedUnitsError`
        For any other units.
    """
    if is_counts(units):
        return values
    elif is_count_rate(units):
        return values * exposure_time
    raise UnsupportedUnitsError(units)


def regroup_array(data, grouping):
    """
    Sum ``data`` over each group.

    Parameters
    ----------
    data : array-like
        Per-channel values.
    grouping : array-like of `int`
        Grouping flags, same length as ``data``.

    Returns
    -------
    `numpy.ndarray`
        One summed value per group. ``data`` is returned as an array
        unchanged when every flag is 1.

    Examples
    --------
    >>> import numpy as np
    >>> from spexfit.datasets.grouping import regroup_array
    >>> regroup_array(np.array([1., 2., 3., 4.]), [1, 0, 1, 0])
    array([3., 7.])
    """
    data = np.asarray(data)
    grouping = np.asarray(grouping)
    if data.shape[0] != grouping.shape[0]:
        raise PreconditionError(f"Data ({data.shape[0]}) and grouping ({grouping.shape[0]}) lengths differ.")
    if np.all(grouping == NEW_GROUP):
        return data
    starts = np.array([start - 1 for _, start, _ in GroupingIterator(grouping)])
    return np.add.reduceat(data, starts, axis=0)


def regroup_quality(quality, grouping):
    """
    Collapse quality flags over each group, the worst flag in a group wins.

    A group is good only if all of its channels are good, otherwise it takes
    the largest flag of its members.
    """
    quality = np.asarray(quality)
    groups = GroupingIterator(grouping)
    out = np.full(len(groups), GOOD_QUALITY, dtype=quality.dtype)
    for (index, _, _), members in zip(groups, groups.slices()):
        group_quality = quality[members]
        if np.any(group_quality != GOOD_QUALITY):
            out[index - 1] = group_quality.max()
    return out


def group_min_counts(spectrum, min_counts):
    """
    Set the grouping of ``spectrum`` so each group holds at least ``min_counts`` counts.

    Channels are added to the running total one at a time; as soon as the
    total reaches ``min_counts`` the channel is flagged 1 and the total is
    reset, otherwise the channel is flagged 0. Count rates are converted to
    counts with the exposure time and every channel's contribution is
    truncated to an integer.

    A final partial group below the threshold is not merged into its
    predecessor, its channels are simply left flagged 0.

    Parameters
    ----------
    spectrum : `~spexfit.datasets.spectrum.Spectrum`
        Only ``grouping`` is changed.
    min_counts : `int`
        Minimum counts per group, > 0.

    Returns
    -------
    `~spexfit.datasets.spectrum.Spectrum`
        The same spectrum.
    """
    if isinstance(min_counts, bool) or not isinstance(min_counts, (int, np.integer)) or min_counts <= 0:
        raise PreconditionError(f"min_counts must be an integer > 0, not {min_counts!r}.")

    counts = to_counts(np.asarray(spectrum.data), spectrum.exposure_time, spectrum.units)

    running = 0
    for i, channel_counts in enumerate(counts):
        running += int(channel_counts)
        if running >= min_counts:
            spectrum.grouping[i] = NEW_GROUP
            running = 0
        else:
            spectrum.grouping[i] = CONTINUE_GROUP

    if running > 0:
        logger.info(f"{running} counts are left over in the last group (group min. {min_counts}).")
    logger.debug(f"Grouped {len(counts)} channels with a minimum of {min_counts} counts.")
    return spectrum


def _signal_to_noise(source, background, areanorm):
    if background is None:
        return source / np.sqrt(source) if source > 0.0 else 0.0
    signal = source - background * areanorm
    noise = np.sqrt(max(source + background * areanorm**2, 0.0))
    return signal / noise if noise > 0.0 else 0.0


def group_min_snr(spectrum, min_snr, background=None):
    r"""
    Set the grouping of ``spectrum`` so each group reaches a minimum signal-to-noise ratio.

    With a background the signal-to-noise ratio is calculated as in the XMM
    SAS ``specgroup`` task:

    .. math::

        S/N = \frac{S - B a}{\sqrt{S + B a^2}}

    where :math:`S` and :math:`B` are the accumulated source and background
    counts and :math:`a` is the area normalisation
    ``(backscale_src / backscale_bkg) * (exposure_src / exposure_bkg)``.
    Without a background it is :math:`S / \sqrt{S}`.

    Background dominated stretches give a negative signal and may never reach
    the threshold; their channels stay flagged 0.

    Parameters
    ----------
    spectrum : `~spexfit.datasets.spectrum.Spectrum`
        Only ``grouping`` is changed.
    min_snr : `float`
        Minimum signal-to-noise ratio per group, > 0.
    background : `~spexfit.datasets.spectrum.Spectrum`, optional
        Background spectrum with the same number of channels. Read only.

    Returns
    -------
    `~spexfit.datasets.spectrum.Spectrum`
        The same spectrum.

    Raises
    ------
    `~spexfit.exceptions.UnsupportedUnitsError`
        If either spectrum is in neither counts nor counts / s.
    `~spexfit.exceptions.PreconditionError`
        If the background length differs or its exposure time is not > 0.
    """
    if min_snr <= 0:
        raise PreconditionError(f"min_snr must be > 0, not {min_snr!r}.")

    source_counts = to_counts(np.asarray(spectrum.data, dtype=float), spectrum.exposure_time, spectrum.units)

    if background is not None:
        if len(background.data) != len(spectrum.data):
            raise PreconditionError(
                f"Background has {len(background.data)} channels, spectrum has {len(spectrum.data)}.")
        if background.exposure_time <= 0:
            raise PreconditionError(f"Background exposure time must be > 0, got {background.exposure_time}.")
        background_counts = to_counts(np.asarray(background.data, dtype=float),
                                      background.exposure_time, background.units)
        areanorm = ((spectrum.background_scale / background.background_scale)
                    * (spectrum.exposure_time / background.exposure_time))
    else:
        background_counts = None
        areanorm = 0.0

    source_sum = 0.0
    background_sum = 0.0
    for i, channel_counts in enumerate(source_counts):
        source_sum += channel_counts
        if background_counts is not None:
            background_sum += background_counts[i]

        snr = _signal_to_noise(source_sum, None if background_counts is None else background_sum, areanorm)
        if snr >= min_snr:
            spectrum.grouping[i] = NEW_GROUP
            source_sum = 0.0
            background_sum = 0.0
        else:
            spectrum.grouping[i] = CONTINUE_GROUP

    logger.debug(f"Grouped {len(source_counts)} channels to a minimum S/N of {min_snr}.")
    return spectrum

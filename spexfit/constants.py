"""
Flags and unit tags shared by the dataset and grouping code.
"""

import astropy.units as u

__all__ = ["COUNTS", "COUNT_RATE", "NEW_GROUP", "CONTINUE_GROUP", "GOOD_QUALITY", "is_counts", "is_count_rate"]

COUNTS = u.ct
COUNT_RATE = u.ct / u.s

# grouping column values
NEW_GROUP = 1
CONTINUE_GROUP = 0

# quality column values, anything else is bad or dubious
GOOD_QUALITY = 0


def is_counts(units):
    """
    True if ``units`` is the counts tag.

    Parameters
    ----------
    units : `astropy.units.UnitBase` or any
        Unit tag carried by a spectrum.

    Returns
    -------
    `bool`
    """
    return _unit_equal(units, COUNTS)


def is_count_rate(units):
    """
    True if ``units`` is the counts-per-second tag.
    """
    return _unit_equal(units, COUNT_RATE)


def _unit_equal(units, reference):
    if not isinstance(units, u.UnitBase):
        return False
    return units == reference

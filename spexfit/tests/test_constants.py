import astropy.units as u

from spexfit.constants import COUNT_RATE, COUNTS, is_count_rate, is_counts


def test_unit_tags():
    assert is_counts(COUNTS)
    assert is_counts(u.Unit("ct"))
    assert is_count_rate(COUNT_RATE)
    assert is_count_rate(u.Unit("ct / s"))
    assert not is_counts(COUNT_RATE)
    assert not is_count_rate(u.keV)
    assert not is_counts("counts")
    assert not is_counts(None)

"""
This module contains package tests for setting up a fit.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import astropy.units as u

from spexfit.datasets.injective import InjectiveData
from spexfit.datasets.layouts import Layout
from spexfit.datasets.spectrum import ErrorStatistics, Spectrum
from spexfit.exceptions import UnsupportedLayoutError
from spexfit.fitting.problem import fit_statistic, prepare_fit
from spexfit.models.models import StraightLineModel


def test_prepare_fit_one_to_one():
    x = np.arange(4.0)
    data = InjectiveData(x, 2 * x + 1, codomain_variance=np.ones(4))
    model = StraightLineModel(edges=False)
    setup = prepare_fit(model, data)

    assert setup.layout is Layout.ONE_TO_ONE
    assert_array_equal(setup.domain, x)
    assert fit_statistic((2, 1), setup, model) == 0
    assert_allclose(fit_statistic((2, 0), setup, model), 4.0)


def test_prepare_fit_binned_spectrum():
    spec = Spectrum(channels=[1, 2, 3], data=[1.5, 2.5, 3.5], units=u.ct,
                    error_statistics=ErrorStatistics.NUMERIC, errors=[1.0, 1.0, 1.0])
    model = StraightLineModel()
    setup = prepare_fit(model, spec)

    assert setup.layout is Layout.CONTIGUOUSLY_BINNED
    assert len(setup.domain) == len(setup.objective) + 1
    assert fit_statistic((1, 0), setup, model) == 0


def test_prepare_fit_arrays_are_independent():
    spec = Spectrum(channels=[1, 2], data=[1.0, 2.0], errors=[1.0, 1.0])
    setup = prepare_fit(StraightLineModel(), spec)
    setup.objective[0] = 100.0
    assert spec.data[0] == 1.0


def test_prepare_fit_no_common_layout():
    spec = Spectrum(channels=[1, 2], data=[1.0, 2.0])
    with pytest.raises(UnsupportedLayoutError, match="StraightLineModel and Spectrum"):
        prepare_fit(StraightLineModel(edges=False), spec)

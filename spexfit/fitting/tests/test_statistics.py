"""
This module contains package tests for the statistics functions.
"""

import numpy as np

from spexfit.fitting.statistics.gaussian import chi_squared


def test_chi_squared():
    sim_data0 = np.array([0])
    sim_model0 = sim_data0
    chi_s0 = chi_squared(sim_data0, sim_model0)

    sim_data1 = np.array([1, 2, 3])
    sim_model1 = sim_data1[::-1]
    chi_s1 = chi_squared(sim_data1, sim_model1)

    assert chi_s0 == 0
    assert chi_s1 == 8


def test_chi_squared_variance():
    sim_data = np.array([1, 2, 3])
    sim_model = sim_data[::-1]

    assert chi_squared(sim_data, sim_model, variance=np.array([2.0, 1.0, 4.0])) == 4 / 2 + 0 + 4 / 4
    # zero variance entries are left out
    assert chi_squared(sim_data, sim_model, variance=np.array([0.0, 1.0, 4.0])) == 1

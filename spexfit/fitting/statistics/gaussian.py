"""
This module contains functions that compute a fit statistic between two data-sets.
"""

import numpy as np

__all__ = ["chi_squared"]


def chi_squared(data_y, model_y, variance=None):
    """
    The form to optimise while fitting.

    Parameters
    ----------
    data_y : `ndarray`
        The data to be fitted.

    model_y : `ndarray`
        The model values being fitted.

    variance : `ndarray`, optional
        Variance of ``data_y``. Residuals are weighted by the inverse variance
        and entries with zero variance are left out. If not given the
        residuals are unweighted.

    Returns
    -------
    `float`
        The value to be optimized that compares the model to the data.
    """
    residuals = (np.asarray(data_y) - np.asarray(model_y)) ** 2
    if variance is None:
        return np.sum(residuals)
    variance = np.asarray(variance)
    usable = variance > 0
    return np.sum(residuals[usable] / variance[usable])

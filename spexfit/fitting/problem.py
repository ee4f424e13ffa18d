"""
Setting up a fit: negotiate a layout between a model and a dataset and pull
the arrays the fit needs out of the dataset.
"""

from dataclasses import dataclass

import numpy as np

from spexfit.datasets.layouts import (
    Layout,
    common_support,
    make_domain,
    make_objective,
    make_objective_variance,
)
from spexfit.fitting.statistics.gaussian import chi_squared
from spexfit.logging import get_logger

logger = get_logger(__name__)

__all__ = ["FitSetup", "prepare_fit", "fit_statistic"]


@dataclass(frozen=True)
class FitSetup:
    '''
    Arrays for a fit in the negotiated layout
    '''
    layout: Layout
    domain: np.ndarray
    objective: np.ndarray
    variance: np.ndarray


def prepare_fit(model, dataset):
    """
    Negotiate the layout of ``model`` and ``dataset`` and build the fit arrays.

    Parameters
    ----------
    model : model with ``supported_layouts``
        e.g. `~spexfit.models.models.StraightLineModel`.
    dataset : `~spexfit.datasets.layouts.AbstractDataset`

    Returns
    -------
    `FitSetup`

    Raises
    ------
    `~spexfit.exceptions.UnsupportedLayoutError`
        If the model and dataset share no layout.
    """
    layout = common_support(model, dataset)
    logger.debug(f"Fitting {type(model).__name__} to {type(dataset).__name__} with layout {layout}.")
    return FitSetup(
        layout=layout,
        domain=np.array(make_domain(layout, dataset)),
        objective=np.array(make_objective(layout, dataset)),
        variance=np.array(make_objective_variance(layout, dataset)),
    )


def fit_statistic(params, setup, model, statistic_func=chi_squared):
    """
    Evaluate ``model`` with ``params`` on the setup's domain and compare it to the objective.

    Parameters
    ----------
    params : `ndarray`
        Values of the model parameters, in the order of ``model.evaluate``.

    setup : `FitSetup`
        From `prepare_fit`.

    model : `astropy.modeling.core._ModelMeta`
        The model being fitted to the data. Crucially will have an
        `evaluate` method.

    statistic_func : `function`
        ``statistic_func(data_y, model_y, variance)``.

    Returns
    -------
    `float`
        The value to be optimized that compares the model to the data.
    """
    model_y = model.evaluate(setup.domain, *params)
    return statistic_func(setup.objective, model_y, setup.variance)

"""
Layouts describe how the domain and objective arrays of a dataset (or the
input and output of a model) correspond to one another.

A participant in a fit declares the layouts it can work with through a
``supported_layouts`` attribute. Before a fit the layouts of all the
participants are negotiated with `common_support`, and the winning layout
decides which ``make_*`` accessors are called on the dataset.
"""

import enum
from functools import reduce

from spexfit.exceptions import UnsupportedLayoutError
from spexfit.logging import get_logger

logger = get_logger(__name__)

__all__ = ["Layout", "LAYOUT_PREFERENCE", "supports", "common_support", "AbstractDataset",
           "make_domain", "make_domain_variance", "make_objective", "make_objective_variance",
           "objective_transformer"]


class Layout(enum.Enum):
    """
    ``ONE_TO_ONE``
        The domain and the objective have the same length and element ``n``
        of one belongs to element ``n`` of the other.
    ``CONTIGUOUSLY_BINNED``
        The domain is one longer than the objective, bin ``n`` spans
        ``domain[n]`` to ``domain[n+1]``.
    """
    ONE_TO_ONE = "one-to-one"
    CONTIGUOUSLY_BINNED = "contiguously-binned"


# order of preference: contiguous bins can normally fall back to one-to-one
LAYOUT_PREFERENCE = (Layout.CONTIGUOUSLY_BINNED, Layout.ONE_TO_ONE)


def _type_name(participant):
    return type(participant).__name__


def supports(layout, participant):
    """
    Check whether ``participant`` declares support for ``layout``.

    Parameters
    ----------
    layout : `Layout`
        The layout to check.
    participant : any
        A dataset or model. Objects without a ``supported_layouts`` attribute
        support nothing.

    Returns
    -------
    `bool`
    """
    return layout in frozenset(getattr(participant, "supported_layouts", ()))


def _pair_support(first, second):
    for layout in LAYOUT_PREFERENCE:
        if supports(layout, first) and supports(layout, second):
            return layout
    raise UnsupportedLayoutError(_type_name(first), _type_name(second))


def common_support(*participants):
    """
    Find the single layout every participant can work with.

    For two participants the layouts are tried in the order of
    `LAYOUT_PREFERENCE`. Further participants are folded in one at a time:
    the layout chosen so far is kept if the next participant supports it,
    contiguous binning falls back to one-to-one if it does not, and
    one-to-one failing is an error.

    Parameters
    ----------
    participants : datasets or models
        At least one participant.

    Returns
    -------
    `Layout`

    Raises
    ------
    `~spexfit.exceptions.UnsupportedLayoutError`
        If no layout is shared.

    Examples
    --------
    >>> from spexfit.datasets.injective import InjectiveData
    >>> from spexfit.datasets.layouts import common_support
    >>> data = InjectiveData([1., 2., 3.], [4., 5., 6.])
    >>> common_support(data, data)
    <Layout.ONE_TO_ONE: 'one-to-one'>
    """
    if len(participants) == 0:
        raise ValueError("Need at least one participant to negotiate a layout.")

    if len(participants) == 1:
        only = participants[0]
        for layout in LAYOUT_PREFERENCE:
            if supports(layout, only):
                return layout
        raise UnsupportedLayoutError(_type_name(only), _type_name(only),
                                     message=f"{_type_name(only)} does not support any layout.")

    first, second, *rest = participants
    start = (_pair_support(first, second), second)
    layout, _ = reduce(_support_reducer, rest, start)
    logger.debug(f"Negotiated layout {layout} for {[_type_name(p) for p in participants]}")
    return layout


def _support_reducer(accumulated, participant):
    layout, previous = accumulated
    if supports(layout, participant):
        return layout, participant
    if layout is Layout.CONTIGUOUSLY_BINNED and supports(Layout.ONE_TO_ONE, participant):
        return Layout.ONE_TO_ONE, participant
    raise UnsupportedLayoutError(_type_name(previous), _type_name(participant))


class AbstractDataset:
    """
    Base class for anything that can be handed to a fit.

    Fitting data is considered to have an *objective* and a *domain*. As the
    domain may be, for example, energy bins (low and high) or single
    frequencies, a dataset advertises the layouts it can produce through
    ``supported_layouts`` and implements the ``_make_*`` hooks for each of
    them. The public entry points are the module level `make_domain`,
    `make_objective`, `make_objective_variance` and `make_domain_variance`
    functions which check support before calling the hooks, so declaring a
    layout and implementing its accessors go together.

    The ``make_`` prefix (rather than ``get_``) signals that work and
    allocations may be involved: the arrays returned are fresh and mutating
    them does not change the dataset.
    """

    supported_layouts = frozenset()

    def _make_objective(self, layout):
        raise NotImplementedError

    def _make_objective_variance(self, layout):
        raise NotImplementedError

    def _make_domain(self, layout):
        raise NotImplementedError

    def _make_domain_variance(self, layout):
        raise NotImplementedError


def _check_layout(layout, dataset):
    if not supports(layout, dataset):
        raise UnsupportedLayoutError(layout, _type_name(dataset),
                                     message=f"Layout {layout} is not implemented for {_type_name(dataset)}.")


def make_objective(layout, dataset):
    """
    Return the array the model is fitted to, shaped for ``layout``.

    Domain for this objective should be returned by `make_domain`.

    Parameters
    ----------
    layout : `Layout`
    dataset : `AbstractDataset`

    Returns
    -------
    `numpy.ndarray`
    """
    _check_layout(layout, dataset)
    return dataset._make_objective(layout)


def make_objective_variance(layout, dataset):
    """
    Return the variance of the objective, shaped like `make_objective`.
    """
    _check_layout(layout, dataset)
    return dataset._make_objective_variance(layout)


def make_domain(layout, dataset):
    """
    Return the array used as the domain for the modelling.
    """
    _check_layout(layout, dataset)
    return dataset._make_domain(layout)


def make_domain_variance(layout, dataset):
    _check_layout(layout, dataset)
    return dataset._make_domain_variance(layout)


def objective_transformer(layout, dataset):
    """
    Return the default transformer, which hands the model output back unchanged.

    Datasets that need response folding or similar can provide an
    ``objective_transformer`` method of their own which is used instead.

    Returns
    -------
    `function`
        ``transform(domain, flux)`` returning the flux in objective space.
    """
    _check_layout(layout, dataset)
    custom = getattr(dataset, "objective_transformer", None)
    if custom is not None:
        return custom(layout)
    logger.warning("Using default objective transformer!")

    def _transformer(domain, flux):
        return flux

    return _transformer

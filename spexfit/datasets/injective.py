import numpy as np

from spexfit.datasets.layouts import AbstractDataset, Layout

__all__ = ["InjectiveData"]


class InjectiveData(AbstractDataset):
    """
    A dataset made of a domain and a codomain array, e.g. simulated data or
    data which has already been reduced elsewhere.

    The layouts it supports follow from the array lengths: equal lengths give
    `~spexfit.datasets.layouts.Layout.ONE_TO_ONE`, a domain one longer than
    the codomain gives `~spexfit.datasets.layouts.Layout.CONTIGUOUSLY_BINNED`.

    Parameters
    ----------
    domain : array-like
        Points or bin edges.
    codomain : array-like
        Values to fit.
    codomain_variance, domain_variance : array-like, optional
        Variances, zero if not given.
    name : `str`, optional
    """

    def __init__(self, domain, codomain, codomain_variance=None, domain_variance=None, name="[no-name]"):
        self.domain = np.array(domain, dtype=float)
        self.codomain = np.array(codomain, dtype=float)
        self.codomain_variance = (np.zeros_like(self.codomain) if codomain_variance is None
                                  else np.array(codomain_variance, dtype=float))
        self.domain_variance = (np.zeros_like(self.domain) if domain_variance is None
                                else np.array(domain_variance, dtype=float))
        self.name = name

        if self.codomain_variance.shape != self.codomain.shape:
            raise ValueError("codomain_variance must have the same shape as codomain.")
        if self.domain_variance.shape != self.domain.shape:
            raise ValueError("domain_variance must have the same shape as domain.")
        if self.domain.shape[0] not in (self.codomain.shape[0], self.codomain.shape[0] + 1):
            raise ValueError(f"Domain length ({self.domain.shape[0]}) must equal the codomain length "
                             f"({self.codomain.shape[0]}) or exceed it by one.")

    @property
    def supported_layouts(self):
        if self.domain.shape[0] == self.codomain.shape[0]:
            return frozenset({Layout.ONE_TO_ONE})
        return frozenset({Layout.CONTIGUOUSLY_BINNED})

    def _make_objective(self, layout):
        return self.codomain.copy()

    def _make_objective_variance(self, layout):
        return self.codomain_variance.copy()

    def _make_domain(self, layout):
        return self.domain.copy()

    def _make_domain_variance(self, layout):
        return self.domain_variance.copy()

    def __repr__(self):
        return f"InjectiveData(name={self.name!r}, n={self.codomain.shape[0]})"

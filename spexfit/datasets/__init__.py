"""
Datasets, their layouts and channel grouping.
"""

from spexfit.datasets.grouping import GroupingIterator, group_min_counts, group_min_snr
from spexfit.datasets.injective import InjectiveData
from spexfit.datasets.layouts import (
    AbstractDataset,
    Layout,
    common_support,
    make_domain,
    make_domain_variance,
    make_objective,
    make_objective_variance,
    supports,
)
from spexfit.datasets.spectrum import (
    ErrorStatistics,
    Spectrum,
    drop_channels,
    isgrouped,
    normalize,
    regroup,
    resize,
    subtract_background,
)

__all__ = ["GroupingIterator", "group_min_counts", "group_min_snr", "InjectiveData", "AbstractDataset",
           "Layout", "common_support", "make_domain", "make_domain_variance", "make_objective",
           "make_objective_variance", "supports", "ErrorStatistics", "Spectrum", "drop_channels",
           "isgrouped", "normalize", "regroup", "resize", "subtract_background"]

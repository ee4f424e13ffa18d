import numpy as np
import pytest
from numpy.testing import assert_array_equal

from spexfit.datasets.injective import InjectiveData
from spexfit.datasets.layouts import (
    AbstractDataset,
    Layout,
    common_support,
    make_domain,
    make_domain_variance,
    make_objective,
    make_objective_variance,
    objective_transformer,
    supports,
)
from spexfit.exceptions import UnsupportedLayoutError


class Participant:
    def __init__(self, *layouts):
        self.supported_layouts = frozenset(layouts)


class OnlyOneToOne(Participant):
    def __init__(self):
        super().__init__(Layout.ONE_TO_ONE)


class OnlyBinned(Participant):
    def __init__(self):
        super().__init__(Layout.CONTIGUOUSLY_BINNED)


class Both(Participant):
    def __init__(self):
        super().__init__(Layout.ONE_TO_ONE, Layout.CONTIGUOUSLY_BINNED)


class Neither(Participant):
    def __init__(self):
        super().__init__()


def test_supports():
    assert supports(Layout.ONE_TO_ONE, OnlyOneToOne())
    assert not supports(Layout.CONTIGUOUSLY_BINNED, OnlyOneToOne())
    assert not supports(Layout.ONE_TO_ONE, object())


def test_common_support_prefers_binned():
    assert common_support(Both(), Both()) is Layout.CONTIGUOUSLY_BINNED
    assert common_support(Both(), OnlyBinned()) is Layout.CONTIGUOUSLY_BINNED


def test_common_support_falls_back():
    assert common_support(OnlyOneToOne(), OnlyOneToOne()) is Layout.ONE_TO_ONE
    assert common_support(Both(), OnlyOneToOne()) is Layout.ONE_TO_ONE


def test_common_support_none():
    with pytest.raises(UnsupportedLayoutError, match="No common support between OnlyOneToOne and OnlyBinned") as e:
        common_support(OnlyOneToOne(), OnlyBinned())
    assert e.value.first == "OnlyOneToOne"
    assert e.value.second == "OnlyBinned"
    with pytest.raises(UnsupportedLayoutError):
        common_support(Neither(), Neither())


def test_common_support_fold():
    assert common_support(Both(), Both(), OnlyBinned()) is Layout.CONTIGUOUSLY_BINNED
    assert common_support(Both(), Both(), OnlyOneToOne()) is Layout.ONE_TO_ONE
    assert common_support(OnlyOneToOne(), OnlyOneToOne(), Both()) is Layout.ONE_TO_ONE
    # once one-to-one is chosen it cannot go back to binned
    with pytest.raises(UnsupportedLayoutError, match="OnlyOneToOne and OnlyBinned"):
        common_support(Both(), OnlyOneToOne(), OnlyBinned())
    with pytest.raises(UnsupportedLayoutError):
        common_support(Both(), Both(), Neither())


def test_common_support_single():
    assert common_support(Both()) is Layout.CONTIGUOUSLY_BINNED
    assert common_support(OnlyOneToOne()) is Layout.ONE_TO_ONE
    with pytest.raises(UnsupportedLayoutError):
        common_support(Neither())
    with pytest.raises(ValueError):
        common_support()


def test_injective_layouts():
    points = InjectiveData([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    binned = InjectiveData([1.0, 2.0, 3.0, 4.0], [4.0, 5.0, 6.0])
    assert points.supported_layouts == {Layout.ONE_TO_ONE}
    assert binned.supported_layouts == {Layout.CONTIGUOUSLY_BINNED}
    with pytest.raises(UnsupportedLayoutError):
        common_support(points, binned)
    with pytest.raises(ValueError):
        InjectiveData([1.0], [1.0, 2.0, 3.0])


def test_injective_accessors_are_copies():
    data = InjectiveData([1.0, 2.0], [3.0, 4.0], codomain_variance=[0.5, 0.25])
    objective = make_objective(Layout.ONE_TO_ONE, data)
    objective[:] = 0
    assert_array_equal(data.codomain, [3.0, 4.0])
    assert_array_equal(make_domain(Layout.ONE_TO_ONE, data), [1.0, 2.0])
    assert_array_equal(make_objective_variance(Layout.ONE_TO_ONE, data), [0.5, 0.25])
    assert_array_equal(make_domain_variance(Layout.ONE_TO_ONE, data), [0.0, 0.0])


def test_accessor_unsupported_layout():
    data = InjectiveData([1.0, 2.0], [3.0, 4.0])
    with pytest.raises(UnsupportedLayoutError, match="not implemented for InjectiveData"):
        make_domain(Layout.CONTIGUOUSLY_BINNED, data)


def test_declared_but_not_implemented():
    class Lazy(AbstractDataset):
        supported_layouts = frozenset({Layout.ONE_TO_ONE})

    with pytest.raises(NotImplementedError):
        make_objective(Layout.ONE_TO_ONE, Lazy())


def test_objective_transformer_default(caplog):
    data = InjectiveData([1.0, 2.0], [3.0, 4.0])
    transform = objective_transformer(Layout.ONE_TO_ONE, data)
    flux = np.array([1.0, 2.0])
    assert transform(data.domain, flux) is flux
    assert "default objective transformer" in caplog.text

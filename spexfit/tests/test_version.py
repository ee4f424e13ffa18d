from importlib.metadata import PackageNotFoundError, version

import pytest

import spexfit


def test_version_from_metadata():
    try:
        installed = version("spexfit")
    except PackageNotFoundError:
        pytest.skip("spexfit is not installed")
    assert spexfit.__version__ == installed
    assert spexfit.__version__ != "unknown"

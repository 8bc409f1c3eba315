import pytest
from core.binning.axis import Axis
from core.binning.histogram import BinnedHistogram
from core.functions.param_hist import ParamHistFunc

@pytest.fixture
def two_bin_hist():
    # Two uniform bins over [0, 2] with nominal contents 4 and 9.
    return BinnedHistogram("tmpl", [Axis.uniform("x", 2, 0.0, 2.0)], [4.0, 9.0])

@pytest.fixture
def abs_func(two_bin_hist):
    return ParamHistFunc("bkg", two_bin_hist, relative=False)

@pytest.fixture
def rel_func(two_bin_hist):
    return ParamHistFunc("bkg", two_bin_hist, relative=True)

@pytest.fixture
def hist_2d():
    # x: 2 bins over [0, 2]; y: 2 bins over [0, 1]. Row-major contents.
    axes = [Axis.uniform("x", 2, 0.0, 2.0), Axis.uniform("y", 2, 0.0, 1.0)]
    return BinnedHistogram("tmpl2d", axes, [[1.0, 2.0], [3.0, 4.0]])

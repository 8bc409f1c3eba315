import pytest
from core.binning.axis import Axis
from core.binning.histogram import BinnedHistogram
from core.exceptions import BinResolutionError, HistFuncError, IntegrationError, OutOfRangeError
from core.functions.param_hist import ParamHistFunc

def test_construction_absolute(abs_func):
    assert abs_func.get_actual(0) == 4.0
    assert abs_func.get_actual(1) == 9.0
    assert not abs_func.relative

def test_construction_relative(rel_func):
    assert rel_func.get_actual(0) == 1.0
    assert rel_func.get_actual(1) == 1.0
    assert rel_func.relative

def test_all_bins_start_constant(rel_func, abs_func):
    for func in (rel_func, abs_func):
        assert all(func.is_constant(i) for i in range(len(func.parameters)))

def test_evaluate_matches_bin_value(rel_func, abs_func):
    rel_func.set_actual(1, 2.5)
    assert rel_func.evaluate({"x": 1.5}) == 2.5 * 9.0
    assert rel_func.evaluate([0.5]) == 1.0 * 4.0
    abs_func.set_actual(0, 7.0)
    assert abs_func.evaluate({"x": 0.2}) == 7.0
    assert abs_func.evaluate({"x": 1.2}) == 9.0

def test_evaluate_uses_current_observable(rel_func):
    rel_func.observables["x"].value = 1.7
    assert rel_func.evaluate() == 9.0
    assert rel_func() == 9.0

def test_evaluate_outside_domain(rel_func):
    with pytest.raises(IndexError):
        rel_func.evaluate({"x": 2.5})
    with pytest.raises(BinResolutionError):
        rel_func.evaluate({"x": -0.01})

def test_nominal_is_read_through(rel_func, two_bin_hist):
    two_bin_hist.set_content(1, 20.0, error=4.0)
    assert rel_func.get_nominal(1) == 20.0
    assert rel_func.get_nominal_error(1) == 4.0
    assert rel_func.evaluate({"x": 1.5}) == 20.0

@pytest.mark.parametrize("value", [0.0, 3.25, -1.0, 1e6])
def test_set_get_round_trip(rel_func, value):
    rel_func.set_actual(1, value)
    assert rel_func.get_actual(1) == value

@pytest.mark.parametrize("ibin", [-1, 2])
def test_accessors_out_of_range(rel_func, ibin):
    with pytest.raises(OutOfRangeError):
        rel_func.get_actual(ibin)
    with pytest.raises(OutOfRangeError):
        rel_func.set_actual(ibin, 1.0)
    with pytest.raises(OutOfRangeError):
        rel_func.get_nominal(ibin)
    with pytest.raises(OutOfRangeError):
        rel_func.get_nominal_error(ibin)

def test_set_constant(rel_func):
    rel_func.set_constant(0, False)
    assert not rel_func.is_constant(0)
    assert rel_func.parameters[0].name == "bkg_gamma_bin_0"

def test_shared_parameters_alias(two_bin_hist):
    donor = ParamHistFunc("sig", two_bin_hist, relative=True)
    other = ParamHistFunc("sig_up", two_bin_hist, relative=True, parameters_from=donor)
    assert other.parameters is donor.parameters
    other.set_actual(0, 3.0)
    assert donor.get_actual(0) == 3.0
    assert donor.evaluate({"x": 0.5}) == 12.0
    del donor
    assert other.get_actual(0) == 3.0

def test_shared_parameters_bin_count_mismatch(two_bin_hist):
    donor = ParamHistFunc("sig", two_bin_hist)
    hist3 = BinnedHistogram("h3", [Axis.uniform("x", 3, 0.0, 3.0)], [1.0, 1.0, 1.0])
    with pytest.raises(HistFuncError):
        ParamHistFunc("bad", hist3, parameters_from=donor)

def test_clone_shares_parameters(rel_func):
    copy = rel_func.clone("bkg_copy")
    assert copy.name == "bkg_copy"
    assert copy.parameters is rel_func.parameters
    assert copy.histogram is rel_func.histogram
    assert copy.relative == rel_func.relative
    rel_func.set_actual(1, 0.5)
    assert copy.get_actual(1) == 0.5

def test_integral_code(hist_2d):
    func = ParamHistFunc("f", hist_2d, relative=False)
    assert func.analytic_integral_code(["x", "y"]) == 1
    assert func.analytic_integral_code(func.observables) == 1
    assert func.analytic_integral_code(["x"]) == 0
    assert func.analytic_integral_code(["y"]) == 0
    assert func.analytic_integral_code([]) == 0

def test_integral_absolute(abs_func):
    assert abs_func.analytic_integral(abs_func.analytic_integral_code(["x"])) == pytest.approx(13.0)

def test_integral_relative(rel_func):
    rel_func.set_actual(1, 2.0)
    assert rel_func.analytic_integral(1) == pytest.approx(22.0)

def test_integral_2d(hist_2d):
    func = ParamHistFunc("f", hist_2d, relative=True)
    # bin volume = (2/2) * (1/2)
    assert func.analytic_integral(1) == pytest.approx(10.0 * 0.5)

def test_integral_bad_code(rel_func):
    with pytest.raises(IntegrationError):
        rel_func.analytic_integral(0)

def test_integral_non_uniform_assumes_uniform_width():
    hist = BinnedHistogram("h", [Axis("x", [0.0, 1.0, 3.0])], [2.0, 2.0])
    func = ParamHistFunc("f", hist, relative=False)
    # Uses (3 - 0) / 2 as the width of every bin rather than the true widths 1 and 2
    assert func.analytic_integral(1) == pytest.approx(6.0)

def test_sampling_hint(rel_func):
    hint = rel_func.plot_sampling_hint("x", 0.0, 2.0)
    points = list(hint)
    assert len(points) == 6
    delta = (2.0202 - (-0.02)) * 1e-8
    for pair, edge in zip(zip(points[::2], points[1::2]), [0.0, 1.0, 2.0]):
        assert pair[0] == pytest.approx(edge - delta, abs=1e-12)
        assert pair[1] == pytest.approx(edge + delta, abs=1e-12)
        assert pair[0] < edge < pair[1]
    assert points == sorted(points)
    # Restartable
    assert list(hint) == points

def test_sampling_hint_widening_includes_nearby_edge(rel_func):
    # The edge at 1.0 is 1% of the range away from hi and still included
    points = list(rel_func.plot_sampling_hint("x", 0.2, 0.995))
    assert len(points) == 2
    assert points[0] < 1.0 < points[1]

def test_sampling_hint_unknown_observable(rel_func):
    assert list(rel_func.plot_sampling_hint("y", 0.0, 2.0)) == []
    assert list(rel_func.bin_boundaries("y", 0.0, 2.0)) == []

def test_bin_boundaries_not_widened(rel_func):
    assert list(rel_func.bin_boundaries("x", 0.0, 2.0)) == [0.0, 1.0, 2.0]
    assert list(rel_func.bin_boundaries("x", 0.5, 1.99)) == [1.0]
    assert list(rel_func.bin_boundaries(rel_func.observables["x"], 0.5, 1.5)) == [1.0]

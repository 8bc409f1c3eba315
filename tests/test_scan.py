import numpy as np
import pandas as pd
import pytest
from core.exceptions import HistFuncError
from core.functions.param_hist import ParamHistFunc
from evaluation.scan import scan

def test_scan_without_hints(rel_func):
    result = scan(rel_func, "x", points=5, hints=False)
    assert np.allclose(result.x, [0.0, 0.5, 1.0, 1.5, 2.0])
    assert np.allclose(result.values, [4.0, 4.0, 9.0, 9.0, 9.0])
    assert result.errors == []
    assert result.stats["points"] == 5

def test_scan_with_hints_straddles_steps(rel_func):
    result = scan(rel_func, "x", 0.0, 2.0, points=3)
    # Hints from the widened range that fall outside [0, 2] are dropped
    assert result.stats["hints"] == 4
    assert result.errors == []
    assert result.x.min() >= 0.0 and result.x.max() <= 2.0
    assert not np.isnan(result.values).any()
    x, v = result.x, result.values
    below = v[(x < 1.0) & (x > 0.99)]
    above = v[(x > 1.0) & (x < 1.01)]
    assert below.tolist() == [4.0]
    assert above.tolist() == [9.0]

def test_scan_default_range_stays_in_domain(rel_func):
    result = scan(rel_func, "x", points=5)
    assert result.errors == []
    assert result.x.min() >= 0.0
    assert result.x.max() <= 2.0

def test_scan_fixed_observables(hist_2d):
    func = ParamHistFunc("f", hist_2d, relative=False)
    result = scan(func, "x", points=2, hints=False, fixed={"y": 0.75})
    assert result.values.tolist() == [2.0, 4.0]

def test_scan_empty_range(rel_func):
    with pytest.raises(HistFuncError):
        scan(rel_func, "x", 1.0, 1.0)

def test_scan_unknown_observable(rel_func):
    with pytest.raises(HistFuncError):
        scan(rel_func, "y")

def test_scan_to_dataframe(rel_func):
    df = scan(rel_func, "x", points=3, hints=False).to_dataframe()
    assert list(df.columns) == ["function", "x", "value"]
    assert len(df) == 3
    assert isinstance(df, pd.DataFrame)

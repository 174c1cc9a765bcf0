"""
tek_contagion/tests/test_panel.py — Tests for panel assembly and imputation.

Tests verify:
- The war table defines the state-year universe; other sources left-join.
- Lags are by calendar year, so gaps yield NaN.
- war_history / peace_years derivation.
- Duplicate keys are rejected.
- Imputation order (state mean → fallback → drop) and its report.
"""

import numpy as np
import pandas as pd
import pytest

from tek_contagion.config import TekConfig
from tek_contagion.panel.imputation import impute_panel
from tek_contagion.panel.merge import add_lags, build_panel, compute_war_history


# ── build_panel ───────────────────────────────────────────────────────────────

def test_panel_rows_match_war_table(small_inputs, small_panel):
    assert len(small_panel) == len(small_inputs.wars)
    assert not small_panel.duplicated(subset=["state_id", "year"]).any()


def test_panel_carries_codes_and_covariates(small_panel):
    row = small_panel[(small_panel["state_id"] == 100) & (small_panel["year"] == 1990)].iloc[0]
    assert row["abbrev3"] == "AAA"
    assert row["abbrev2"] == "AA"
    assert row["polity"] == -3.0
    assert row["region"] == "Test"


def test_war_lag_by_calendar_year(small_panel):
    lag = small_panel.set_index(["state_id", "year"])["war_lag"]
    assert np.isnan(lag[(101, 1989)])
    assert lag[(101, 1990)] == 1
    assert lag[(101, 1991)] == 1
    assert lag[(101, 1992)] == 0
    assert np.isnan(lag[(104, 1991)])  # first year on record


def test_lag_gap_yields_nan():
    panel = pd.DataFrame({"state_id": [1, 1, 1], "year": [2000, 2001, 2003], "war": [1, 0, 1]})
    lagged = add_lags(panel, ["war"]).set_index("year")["war_lag"]
    assert np.isnan(lagged[2000])
    assert lagged[2001] == 1
    assert np.isnan(lagged[2003])


def test_war_history_and_peace_years():
    panel = pd.DataFrame({
        "state_id": [1] * 7,
        "year": list(range(2000, 2007)),
        "war": [0, 1, 1, 0, 0, 1, 0],
    })
    out = compute_war_history(panel).set_index("year")
    assert list(out["war_history"]) == [0, 0, 1, 1, 1, 1, 2]
    assert list(out["peace_years"]) == [0, 1, 0, 0, 1, 2, 0]


def test_war_history_independent_per_state():
    panel = pd.DataFrame({
        "state_id": [2, 2, 1, 1],
        "year": [2000, 2001, 2000, 2001],
        "war": [1, 0, 0, 0],
    })
    out = compute_war_history(panel).set_index(["state_id", "year"])
    assert out.loc[(1, 2001), "war_history"] == 0
    assert out.loc[(2, 2001), "war_history"] == 1
    assert out.loc[(1, 2001), "peace_years"] == 1


def test_source_war_history_kept_when_complete(small_inputs):
    wars = small_inputs.wars.copy()
    wars["war_history"] = 7
    wars["peace_years"] = 3
    small_inputs.wars = wars
    panel = build_panel(small_inputs)
    assert (panel["war_history"] == 7).all()


def test_duplicate_keys_rejected(small_inputs):
    small_inputs.polity = pd.concat([small_inputs.polity, small_inputs.polity.head(1)])
    with pytest.raises(ValueError, match="polity"):
        build_panel(small_inputs)


def test_non_positive_gdp_treated_as_missing(small_inputs):
    gdp = small_inputs.gdp.copy()
    gdp.loc[0, "gdp_pc"] = 0.0
    small_inputs.gdp = gdp
    panel = build_panel(small_inputs)
    first = small_inputs.gdp.iloc[0]
    value = panel.loc[(panel["state_id"] == first["state_id"]) & (panel["year"] == first["year"]), "gdp_pc"]
    assert value.isna().all()


# ── impute_panel ──────────────────────────────────────────────────────────────

def test_state_mean_fill(small_panel):
    out, report = impute_panel(small_panel)
    row = out[(out["state_id"] == 102) & (out["year"] == 1990)].iloc[0]
    observed = small_panel.loc[(small_panel["state_id"] == 102) & small_panel["gdp_pc"].notna(), "gdp_pc"]
    assert row["gdp_pc"] == pytest.approx(observed.mean())
    assert report.filled_by_state_mean["gdp_pc"] == 1


def test_fallback_after_state_mean(small_panel):
    config = TekConfig(fallback_values={"gdp_pc": 555.0})
    out, report = impute_panel(small_panel, config)
    assert (out.loc[out["state_id"] == 106, "gdp_pc"] == 555.0).all()
    # 106 has 4 panel years; 1989 has no war_lag but the fallback runs before the drop.
    assert report.filled_by_fallback["gdp_pc"] == 4
    assert out["log_gdp"].notna().all()


def test_rows_missing_required_predictors_dropped(small_panel):
    out, report = impute_panel(small_panel)
    assert out["war_lag"].notna().all()
    # 6 states lack war_lag in 1989, state 104 lacks it in 1991.
    assert report.rows_dropped == 7
    assert report.rows_in == len(small_panel)
    assert report.rows_out == len(out) == len(small_panel) - 7
    assert report.dropped_by_column["war_lag"] == 7


def test_no_fallback_leaves_nan_and_drops_when_required(small_panel):
    panel = small_panel.copy()
    panel.loc[panel["state_id"] == 103, "polity"] = np.nan
    out, report = impute_panel(panel, TekConfig(fallback_values={}))
    assert 103 not in set(out["state_id"])
    assert report.filled_by_fallback == {}


def test_missing_required_column_raises(small_panel):
    with pytest.raises(ValueError, match="war_lag"):
        impute_panel(small_panel.drop(columns=["war_lag"]))


def test_imputation_does_not_mutate_input(small_panel):
    before = small_panel.copy()
    impute_panel(small_panel)
    pd.testing.assert_frame_equal(small_panel, before)

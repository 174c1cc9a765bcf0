"""
tek_contagion/panel/merge.py — State-year panel assembly.

The war-incidence table defines the state-year universe: a state is on record
for a year iff the conflict dataset lists it. Polity, GDP, state codes and
region are left-joined onto that spine, war history counters are derived when
the source omits them, and every war flag gains a one-year lag.
"""

import logging

import numpy as np
import pandas as pd

from tek_contagion.ingestion.loaders import WAR_FLAGS, StudyInputs

logger = logging.getLogger(__name__)

PANEL_KEYS = ["state_id", "year"]


def assert_unique_keys(df: pd.DataFrame, source: str) -> None:
    """Raise ValueError if (state_id, year) is not unique in df."""
    dupes = df.duplicated(subset=PANEL_KEYS, keep=False)
    if dupes.any():
        sample = df.loc[dupes, PANEL_KEYS].drop_duplicates().head(5).to_dict("records")
        raise ValueError(
            f"{source}: {int(dupes.sum())} rows share a (state_id, year) key, e.g. {sample}"
        )


def compute_war_history(panel: pd.DataFrame, flag: str = "war") -> pd.DataFrame:
    """
    Derive ``war_history`` and ``peace_years`` from a 0/1 war flag.

    war_history counts war episodes (a war year not preceded by a war year)
    that started strictly before the row's year. peace_years counts the
    consecutive non-war years immediately before the row's year; it is 0 in
    the year after a war year. Gaps in a state's series are treated as
    contiguous: only the state's own observed rows are walked.

    Returns a copy of panel with the two columns (re)computed.
    """
    out = panel.sort_values(PANEL_KEYS).copy()
    histories: list[int] = []
    peaces: list[int] = []

    for _, group in out.groupby("state_id", sort=False):
        episodes = 0
        peace = 0
        previous = 0
        for value in group[flag].fillna(0).astype(int):
            histories.append(episodes)
            peaces.append(peace)
            if value == 1 and previous == 0:
                episodes += 1
            peace = 0 if value == 1 else peace + 1
            previous = value

    # groupby(sort=False) preserves first-appearance order; since out is
    # sorted by state_id, the flat lists line up with out's row order.
    out["war_history"] = histories
    out["peace_years"] = peaces
    return out


def add_lags(panel: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """
    Add ``<col>_lag`` for each column: the state's value in year - 1.

    The lag is taken by calendar year, not by row position, so a state with a
    gap in its series gets NaN in the first year after the gap.
    """
    lagged = panel[PANEL_KEYS + columns].copy()
    lagged["year"] = lagged["year"] + 1
    lagged = lagged.rename(columns={col: f"{col}_lag" for col in columns})
    return panel.merge(lagged, on=PANEL_KEYS, how="left", validate="one_to_one")


def build_panel(inputs: StudyInputs) -> pd.DataFrame:
    """
    Merge the raw inputs into one state-year panel.

    Args:
        inputs: StudyInputs from load_study_inputs().

    Returns:
        DataFrame keyed by (state_id, year) with polity, gdp_pc, war flags,
        war_history, peace_years, <flag>_lag columns, state codes and region.

    Raises:
        ValueError: If any yearly source repeats a (state_id, year) key.
    """
    wars = inputs.wars.copy()
    assert_unique_keys(wars, "war incidence")
    assert_unique_keys(inputs.polity, "polity")
    assert_unique_keys(inputs.gdp, "gdp")

    flags = [flag for flag in WAR_FLAGS if flag in wars.columns]

    if "war_history" not in wars.columns or "peace_years" not in wars.columns \
            or wars[["war_history", "peace_years"]].isna().any().any():
        logger.info("Deriving war_history and peace_years from the war flag.")
        wars = compute_war_history(wars, flag="war")

    panel = wars.merge(inputs.polity, on=PANEL_KEYS, how="left")
    panel = panel.merge(inputs.gdp, on=PANEL_KEYS, how="left")
    panel = panel.merge(inputs.state_codes, on="state_id", how="left")
    if not inputs.regions.empty:
        panel = panel.merge(inputs.regions[["state_id", "region"]], on="state_id", how="left")

    panel = add_lags(panel, flags)
    panel = panel.sort_values(PANEL_KEYS).reset_index(drop=True)

    # Non-positive GDP cannot be logged; treat as missing so imputation sees it.
    bad_gdp = panel["gdp_pc"] <= 0
    if bad_gdp.any():
        logger.warning("Treating %d non-positive gdp_pc value(s) as missing.", int(bad_gdp.sum()))
        panel.loc[bad_gdp, "gdp_pc"] = np.nan

    logger.info(
        "Panel built: %d state-years, %d states, years %d–%d.",
        len(panel),
        panel["state_id"].nunique(),
        int(panel["year"].min()) if len(panel) else 0,
        int(panel["year"].max()) if len(panel) else 0,
    )
    return panel

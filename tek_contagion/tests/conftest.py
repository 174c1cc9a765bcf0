"""
tek_contagion/tests/conftest.py — Shared pytest fixtures.

Two worlds:

small_inputs — a hand-built 7-state world, 1989–1992, whose graphs and
metrics are worked out by hand in the tests:

    group 1 "Alpha"  : 100, 101, 102      (triangle)
    group 2 "Beta"   : 102, 103, 104      (104 exists only from 1991)
    group 3 "Gamma"  : 100, 101           (second shared group for 100–101)
    group 4 "Delta"  : 105                (single-member group, no edge)
    state 106        : no kinship group   (always isolated)

    war: 101 in 1989–1990, 103 in 1990.

synthetic_inputs — a seeded 30-state × 25-year world with random kinship
groups and a persistent war process, large enough to fit the logit sequence.
"""

import numpy as np
import pandas as pd
import pytest

from tek_contagion.config import DEFAULT_CONFIG, TekConfig
from tek_contagion.ingestion.loaders import StudyInputs

SEED = 41

SMALL_YEARS = [1989, 1990, 1991, 1992]
SMALL_STATES = [100, 101, 102, 103, 105, 106]
LATE_STATE = 104
LATE_STATE_FIRST_YEAR = 1991


def _small_state_years() -> list[tuple[int, int]]:
    rows = [(s, y) for y in SMALL_YEARS for s in SMALL_STATES]
    rows += [(LATE_STATE, y) for y in SMALL_YEARS if y >= LATE_STATE_FIRST_YEAR]
    return sorted(rows)


def make_small_inputs() -> StudyInputs:
    state_years = _small_state_years()
    war_years = {(101, 1989), (101, 1990), (103, 1990)}

    wars = pd.DataFrame(
        [{"state_id": s, "year": y, "war": int((s, y) in war_years)} for s, y in state_years]
    )
    polity = pd.DataFrame(
        [{"state_id": s, "year": y, "polity": float(s - 103)} for s, y in state_years]
    )
    # 102 has one missing year (state-mean fill); 106 has no GDP at all (fallback).
    gdp = pd.DataFrame(
        [
            {"state_id": s, "year": y, "gdp_pc": np.nan if (s == 102 and y == 1990) or s == 106
             else 1000.0 + 10 * s + (y - 1989)}
            for s, y in state_years
        ]
    )
    state_codes = pd.DataFrame(
        {
            "state_id": [100, 101, 102, 103, 104, 105, 106],
            "abbrev3": ["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "GGG"],
            "abbrev2": ["AA", "BB", "CC", "DD", "EE", "FF", "GG"],
            "state_name": ["Aland", "Bland", "Cland", "Dland", "Eland", "Fland", "Gland"],
        }
    )
    kinship = pd.DataFrame(
        [
            (100, 1, "Alpha"), (101, 1, "Alpha"), (102, 1, "Alpha"),
            (102, 2, "Beta"), (103, 2, "Beta"), (104, 2, "Beta"),
            (100, 3, "Gamma"), (101, 3, "Gamma"),
            (105, 4, "Delta"),
        ],
        columns=["state_id", "group_id", "group_name"],
    )
    kinship["region"] = "Test"
    regions = pd.DataFrame({"state_id": state_codes["state_id"], "region": "Test"})

    return StudyInputs(
        state_codes=state_codes,
        kinship=kinship,
        polity=polity,
        gdp=gdp,
        wars=wars,
        regions=regions,
    )


def make_synthetic_inputs(n_states: int = 30, start: int = 1970, end: int = 1994) -> StudyInputs:
    rng = np.random.default_rng(SEED)
    states = list(range(200, 200 + n_states))
    years = list(range(start, end + 1))

    wars_rows = []
    polity_rows = []
    gdp_rows = []
    for s in states:
        at_war = 0
        base_polity = rng.integers(-10, 11)
        base_gdp = rng.uniform(500, 20000)
        for y in years:
            # Persistent war process: onset 0.12, continuation 0.65.
            at_war = int(rng.random() < (0.65 if at_war else 0.12))
            wars_rows.append({"state_id": s, "year": y, "war": at_war})
            polity_rows.append({
                "state_id": s, "year": y,
                "polity": float(np.clip(base_polity + rng.integers(-2, 3), -10, 10)),
            })
            gdp = base_gdp * (1.02 ** (y - start))
            gdp_rows.append({
                "state_id": s, "year": y,
                "gdp_pc": np.nan if rng.random() < 0.05 else gdp,
            })

    kin_rows = []
    for group in range(1, 16):
        size = int(rng.integers(2, 6))
        for s in rng.choice(states, size=size, replace=False):
            kin_rows.append({"state_id": int(s), "group_id": group, "group_name": f"TEK-{group}"})

    state_codes = pd.DataFrame({
        "state_id": states,
        "abbrev3": [f"S{i:02d}" for i in range(n_states)],
        "abbrev2": [f"{i:02d}" for i in range(n_states)],
        "state_name": [f"State {i}" for i in range(n_states)],
    })
    return StudyInputs(
        state_codes=state_codes,
        kinship=pd.DataFrame(kin_rows),
        polity=pd.DataFrame(polity_rows),
        gdp=pd.DataFrame(gdp_rows),
        wars=pd.DataFrame(wars_rows),
        regions=pd.DataFrame({"state_id": states, "region": ["North", "South", "East"] * (n_states // 3)}),
    )


def write_inputs_csv(inputs: StudyInputs, data_dir, config: TekConfig = DEFAULT_CONFIG) -> None:
    """Write inputs as CSVs using the source-style column names loaders accept."""
    inputs.state_codes.rename(
        columns={"state_id": "ccode", "abbrev3": "stateabb", "abbrev2": "iso2", "state_name": "statenme"}
    ).to_csv(data_dir / config.state_codes_file, index=False)
    inputs.kinship.rename(
        columns={"state_id": "ccode", "group_id": "tekid", "group_name": "tekname"}
    ).to_csv(data_dir / config.kinship_file, index=False)
    inputs.polity.rename(columns={"state_id": "ccode", "polity": "polity2"}).to_csv(
        data_dir / config.polity_file, index=False
    )
    inputs.gdp.rename(columns={"state_id": "ccode", "gdp_pc": "gdppc"}).to_csv(
        data_dir / config.gdp_file, index=False
    )
    inputs.wars.rename(columns={"state_id": "ccode"}).to_csv(data_dir / config.war_file, index=False)
    inputs.regions.rename(columns={"state_id": "ccode"}).to_csv(data_dir / config.region_file, index=False)


@pytest.fixture
def small_config() -> TekConfig:
    return TekConfig(study_start_year=1989, study_end_year=1992, cv_folds=2)


@pytest.fixture
def small_inputs() -> StudyInputs:
    return make_small_inputs()


@pytest.fixture
def small_panel(small_inputs):
    from tek_contagion.panel.merge import build_panel
    return build_panel(small_inputs)


@pytest.fixture(scope="session")
def synthetic_inputs() -> StudyInputs:
    return make_synthetic_inputs()


@pytest.fixture
def synthetic_config() -> TekConfig:
    return TekConfig(study_start_year=1970, study_end_year=1994, cv_folds=3)


@pytest.fixture
def small_data_dir(tmp_path, small_inputs):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    write_inputs_csv(small_inputs, data_dir)
    return data_dir


@pytest.fixture
def synthetic_data_dir(tmp_path, synthetic_inputs):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    write_inputs_csv(synthetic_inputs, data_dir)
    return data_dir

"""
tek_contagion/ingestion/loaders.py — CSV readers for the study inputs.

Every source ships with its own column names (COW ``ccode``, Polity
``polity2``, TEK ``tekid`` and so on). Each loader renames the accepted
aliases to one canonical vocabulary, coerces numeric keys, and drops rows
that cannot be keyed. Nothing is imputed here; that happens in
tek_contagion.panel.imputation so every substitution is logged in one place.
"""

import logging
import os
from dataclasses import dataclass

import pandas as pd

from tek_contagion.config import DEFAULT_CONFIG, TekConfig

logger = logging.getLogger(__name__)


WAR_FLAGS = ("war", "war_terr", "war_gov", "war_eth", "war_terr_eth", "war_gov_eth")

# canonical name → accepted source names (canonical name always accepted)
_STATE_CODE_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "abbrev3": ("stateabb",),
    "abbrev2": ("iso2",),
    "state_name": ("statenme",),
}
_KINSHIP_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "group_id": ("tek_id", "tekid"),
    "group_name": ("tek_name", "tekname"),
    "region": (),
}
_POLITY_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "year": (),
    "polity": ("polity2",),
}
_GDP_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "year": (),
    "gdp_pc": ("gdppc", "rgdppc"),
}
_WAR_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "year": (),
    "war_history": ("warhist",),
    "peace_years": ("peaceyears",),
    **{flag: () for flag in WAR_FLAGS},
}
_REGION_ALIASES = {
    "state_id": ("ccode", "cowcode"),
    "region": (),
}


@dataclass
class StudyInputs:
    """The six raw tables, canonicalized but not yet merged."""

    state_codes: pd.DataFrame
    kinship: pd.DataFrame
    polity: pd.DataFrame
    gdp: pd.DataFrame
    wars: pd.DataFrame
    regions: pd.DataFrame


def canonicalize_columns(
    df: pd.DataFrame,
    aliases: dict[str, tuple[str, ...]],
    required: tuple[str, ...],
    source: str,
) -> pd.DataFrame:
    """
    Rename alias columns to canonical names and keep only known columns.

    Column matching is case-insensitive. The first alias found wins; if the
    canonical name is already present it takes precedence over any alias.

    Raises:
        ValueError: If any column in ``required`` cannot be resolved.
    """
    lower_to_actual = {str(c).strip().lower(): c for c in df.columns}
    rename: dict[str, str] = {}
    for canonical, names in aliases.items():
        for candidate in (canonical, *names):
            actual = lower_to_actual.get(candidate.lower())
            if actual is not None:
                rename[actual] = canonical
                break

    missing = [col for col in required if col not in rename.values()]
    if missing:
        raise ValueError(
            f"{source}: missing required column(s) {missing}; "
            f"found {list(df.columns)}"
        )

    out = df[list(rename.keys())].rename(columns=rename)
    return out


def _coerce_keys(df: pd.DataFrame, keys: tuple[str, ...], source: str) -> pd.DataFrame:
    for key in keys:
        df[key] = pd.to_numeric(df[key], errors="coerce")
    before = len(df)
    df = df.dropna(subset=list(keys)).copy()
    dropped = before - len(df)
    if dropped:
        logger.warning("%s: dropped %d row(s) with unusable %s.", source, dropped, "/".join(keys))
    for key in keys:
        df[key] = df[key].astype(int)
    return df.reset_index(drop=True)


def load_state_codes(path: str) -> pd.DataFrame:
    """Load the state-code crosswalk (numeric id, 2- and 3-letter codes, name)."""
    logger.info("Loading state codes from: %s", path)
    df = canonicalize_columns(pd.read_csv(path), _STATE_CODE_ALIASES, ("state_id",), path)
    df = _coerce_keys(df, ("state_id",), path)
    return df.drop_duplicates(subset=["state_id"]).reset_index(drop=True)


def load_kinship(path: str) -> pd.DataFrame:
    """
    Load the TEK group-membership table: one row per (state, kinship group).

    Duplicate (state_id, group_id) rows are collapsed. A missing group_name
    falls back to the group id rendered as a string so that edge labels are
    never empty.
    """
    logger.info("Loading kinship groups from: %s", path)
    df = canonicalize_columns(
        pd.read_csv(path), _KINSHIP_ALIASES, ("state_id", "group_id"), path
    )
    df = _coerce_keys(df, ("state_id",), path)
    df = df.dropna(subset=["group_id"]).copy()
    if "group_name" not in df.columns:
        df["group_name"] = df["group_id"].astype(str)
    else:
        df["group_name"] = df["group_name"].where(
            df["group_name"].notna(), df["group_id"].astype(str)
        ).astype(str)

    before = len(df)
    df = df.drop_duplicates(subset=["state_id", "group_id"]).reset_index(drop=True)
    if before != len(df):
        logger.info("%s: collapsed %d duplicate membership row(s).", path, before - len(df))

    logger.info(
        "Loaded %d memberships: %d states, %d kinship groups.",
        len(df), df["state_id"].nunique(), df["group_id"].nunique(),
    )
    return df


def load_polity(path: str) -> pd.DataFrame:
    """Load regime scores as (state_id, year, polity)."""
    logger.info("Loading polity scores from: %s", path)
    df = canonicalize_columns(pd.read_csv(path), _POLITY_ALIASES, ("state_id", "year", "polity"), path)
    df = _coerce_keys(df, ("state_id", "year"), path)
    df["polity"] = pd.to_numeric(df["polity"], errors="coerce")
    return df


def load_gdp(path: str) -> pd.DataFrame:
    """Load per-capita GDP as (state_id, year, gdp_pc)."""
    logger.info("Loading GDP per capita from: %s", path)
    df = canonicalize_columns(pd.read_csv(path), _GDP_ALIASES, ("state_id", "year", "gdp_pc"), path)
    df = _coerce_keys(df, ("state_id", "year"), path)
    df["gdp_pc"] = pd.to_numeric(df["gdp_pc"], errors="coerce")
    return df


def load_wars(path: str) -> pd.DataFrame:
    """
    Load war incidence flags as (state_id, year, war, war_terr, ...).

    Only ``war`` is required; the territorial/governmental/ethnic breakdowns
    and the history counters are kept when present. Flags are coerced to 0/1.
    """
    logger.info("Loading war incidence from: %s", path)
    df = canonicalize_columns(pd.read_csv(path), _WAR_ALIASES, ("state_id", "year", "war"), path)
    df = _coerce_keys(df, ("state_id", "year"), path)
    for flag in WAR_FLAGS:
        if flag in df.columns:
            values = pd.to_numeric(df[flag], errors="coerce").fillna(0)
            df[flag] = (values > 0).astype(int)
    for counter in ("war_history", "peace_years"):
        if counter in df.columns:
            df[counter] = pd.to_numeric(df[counter], errors="coerce")
    return df


def load_regions(path: str) -> pd.DataFrame:
    """Load the region classification as (state_id, region)."""
    logger.info("Loading region classification from: %s", path)
    df = canonicalize_columns(pd.read_csv(path), _REGION_ALIASES, ("state_id", "region"), path)
    df = _coerce_keys(df, ("state_id",), path)
    return df.drop_duplicates(subset=["state_id"]).reset_index(drop=True)


def load_study_inputs(
    data_dir: str | None = None,
    config: TekConfig = DEFAULT_CONFIG,
) -> StudyInputs:
    """
    Read all six input tables from ``data_dir`` using the file names in config.

    Raises:
        FileNotFoundError: If any input file is absent.
        ValueError:        If any input lacks a required column.
    """
    data_dir = data_dir or config.data_dir

    def _path(name: str) -> str:
        return os.path.join(data_dir, name)

    return StudyInputs(
        state_codes=load_state_codes(_path(config.state_codes_file)),
        kinship=load_kinship(_path(config.kinship_file)),
        polity=load_polity(_path(config.polity_file)),
        gdp=load_gdp(_path(config.gdp_file)),
        wars=load_wars(_path(config.war_file)),
        regions=load_regions(_path(config.region_file)),
    )

"""
tek_contagion/config.py — All tunable parameters for the kinship-contagion study.

No sentinel, fold count or file name should be hardcoded in a pipeline module.
Every constant that changes a number in the merged panel lives here so that a
replication variant is a single-file diff.
"""

from dataclasses import dataclass, field


def _default_fallbacks() -> dict[str, float]:
    return {"gdp_pc": 1000.0}


@dataclass(frozen=True)
class TekConfig:
    """
    Immutable configuration for the kinship network pipeline.

    Override by constructing a new TekConfig with the desired values, or with
    dataclasses.replace(DEFAULT_CONFIG, ...).
    """

    # ── Study horizon ─────────────────────────────────────────────────────────
    study_start_year: int = 1946
    study_end_year: int = 2003
    # Inclusive bounds. The default horizon covers 58 years.

    # ── Clustering sentinels ──────────────────────────────────────────────────
    isolated_clustering: float = 0.001
    # Assigned to states with no kinship neighbor in a year. Kept off zero so
    # isolated states stay distinguishable from open (triangle-free) ego nets.

    undefined_clustering: float = 0.002
    # Assigned to states with exactly one kinship neighbor, where no triangle
    # is possible and the coefficient is undefined. Must differ from
    # isolated_clustering.

    clustering_precision: int = 3
    # Decimal places kept for computable clustering coefficients.

    # ── Neighborhood conflict ─────────────────────────────────────────────────
    isolated_neighbor_war: int = 0
    # Neighbor-war count assigned to states with no kinship neighbor.

    conflict_flag: str = "war"
    # Panel column whose prior-year value is summed across kin neighbors.

    # ── Imputation ────────────────────────────────────────────────────────────
    imputed_columns: tuple[str, ...] = ("gdp_pc", "polity")
    # Filled with the state's historical mean before any fallback.

    fallback_values: dict[str, float] = field(default_factory=_default_fallbacks)
    # Residual fallback per column after state-mean imputation. Columns not
    # listed here keep their NaN and may be dropped as required predictors.

    required_predictors: tuple[str, ...] = ("polity", "war_lag")
    # Rows missing any of these are dropped before modeling.

    # ── Cross-validation ──────────────────────────────────────────────────────
    cv_folds: int = 10
    random_state: int = 41

    # ── Input files (relative to the data directory) ─────────────────────────
    state_codes_file: str = "state_codes.csv"
    kinship_file: str = "tek_kinship.csv"
    polity_file: str = "polity.csv"
    gdp_file: str = "gdp.csv"
    war_file: str = "war.csv"
    region_file: str = "regions.csv"

    # ── Output ────────────────────────────────────────────────────────────────
    data_dir: str = "data"
    output_dir: str = "output"

    @property
    def study_years(self) -> range:
        """Every calendar year of the study, inclusive of both bounds."""
        return range(self.study_start_year, self.study_end_year + 1)

    def __post_init__(self) -> None:
        if self.study_end_year < self.study_start_year:
            raise ValueError(
                f"study_end_year ({self.study_end_year}) precedes "
                f"study_start_year ({self.study_start_year})"
            )
        if self.isolated_clustering == self.undefined_clustering:
            raise ValueError(
                "isolated_clustering and undefined_clustering must differ "
                f"(both set to {self.isolated_clustering})"
            )
        if self.cv_folds < 2:
            raise ValueError(f"cv_folds must be >= 2, got {self.cv_folds}")


# Singleton default — import this everywhere instead of constructing anew.
DEFAULT_CONFIG = TekConfig()

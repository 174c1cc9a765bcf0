"""
tek_contagion.viz — Figures for the study.

Modules:
    plotly_graph — Interactive HTML kinship network for one year.
    figures      — Static matplotlib PNGs for the report.
"""

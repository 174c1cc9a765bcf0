"""
tek_contagion.metrics — Per-state kinship network metrics.

Modules:
    clustering   — Ego-network clustering coefficient with sentinels.
    neighborhood — Kin neighbors carrying a conflict flag.
    yearly       — Year-loop driver and left-join back onto the panel.

All sentinels and the conflict flag name live in tek_contagion.config.TekConfig.
"""

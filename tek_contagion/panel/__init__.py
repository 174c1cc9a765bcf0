"""
tek_contagion.panel — State-year panel assembly and missing-value policy.

Modules:
    merge      — Join the yearly sources, derive war history and lags.
    imputation — State-mean / fallback / listwise-drop policy with a report.
"""

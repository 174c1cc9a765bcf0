"""
tek_contagion.models — Logistic regression sequence with k-fold CV.
"""

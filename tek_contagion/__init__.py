"""
tek_contagion — Transborder ethnic kinship networks and the spread of
intrastate armed conflict.

Builds a yearly kinship graph between states that host the same transborder
ethnic group, measures how tightly each state's kin partners are tied to one
another (ego clustering) and how many of them were at war, and feeds both into
a sequence of cross-validated logistic regressions of war incidence.

Pipeline stages:
- Inputs and panel (tek_contagion.ingestion, tek_contagion.panel)
- Per-year kinship graph (tek_contagion.graph)
- Clustering and neighbor conflict (tek_contagion.metrics)
- Logit sequence + k-fold CV (tek_contagion.models)
"""

__version__ = "0.1.0"

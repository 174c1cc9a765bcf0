"""
tek_contagion.ingestion — CSV readers that canonicalize the study inputs.

Modules:
    loaders — state codes, kinship membership, polity, GDP, war, regions.
"""

"""
tek_contagion.reports — Study summary (JSON) and Markdown report export.
"""

"""
View models for the analysis page.

Tab dispatch (loading / ready / absent), per-tab narratives, stat cards and
loading messages. Everything here is a pure function of fetched state.
"""

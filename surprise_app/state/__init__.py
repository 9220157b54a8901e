"""
Selection and loading state.

Holds the parameter store, the per-dataset fetch state records, and the
loading escalation state machine (IDLE → LOADING → ESCALATED → IDLE).
"""

"""
Core application engine for orchestrating device and catalog workflows.

The `Orchestrator` sequences calls to the device gateway and the catalog
client, owns the observable workflow state, and decides how each failure is
reported.
"""

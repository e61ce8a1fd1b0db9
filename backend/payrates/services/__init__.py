"""Services Layer — async rate operations and the operator workflow.

Invariants:
    - Loader, Creator and Editor each await exactly one store operation
    - All store failures leave this layer as typed PayRatesError subclasses
    - RateWorkflow is the only place that touches RateWorkflowState
"""

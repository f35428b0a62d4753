"""
Eligibility Service - Dental Benefits Aggregation Engine

Determines dental coverage across the procedure catalog with one general
eligibility inquiry, per-code inquiries only where the general answer does not
already cover a code, and a synthetic report when the upstream is unusable.
"""

__version__ = "0.1.0"

"""
API BDD harness.

Scenario execution engine for behavior-driven API tests: per-scenario
context, HTTP request/response pipeline and database cross-validation with
graceful degradation.
"""

__version__ = "0.1.0"

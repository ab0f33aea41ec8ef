"""
Step-level services.

Each module implements one family of BDD steps on top of the core:
request preparation/sending, response validation and database checks.
"""

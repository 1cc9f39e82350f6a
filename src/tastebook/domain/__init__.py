"""
Tastebook - Domain helpers.

Pure functions with no I/O: safe to call from services, routes and tests.
"""

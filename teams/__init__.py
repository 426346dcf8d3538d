"""teams/ -- Team model and persistence.

Layer rule: teams/ imports only stdlib + third-party libraries.
"""

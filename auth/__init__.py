"""auth/ -- Users, bearer tokens, and the auth gate for TeamGate.

Layer rule: auth/ imports stdlib, third-party libraries, and core/ only.
It does NOT import from api/ or teams/.
api/ imports from auth/, not the other way around.
"""

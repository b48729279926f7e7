"""auth/ -- Credential hashing, token issuance and the authentication service.

Layer rule: auth/ does NOT import from api/.
api/ imports from auth/, not the other way around. auth/service.py reads
storage exception types only; it reaches storage itself through the
protocols in auth/interfaces.py.
"""

"""auth/ -- Accounts, password hashing, and stateless access tokens for adboard.

Layer rule: auth/ imports only core/ plus stdlib and third-party libraries.
It does NOT import from api/ or ads/.
api/ imports from auth/, not the other way around.
"""

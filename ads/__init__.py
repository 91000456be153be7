"""ads/ -- Classified ads: domain model, feed query builder, store, and service.

Layer rule: ads/ imports only core/ plus stdlib and third-party libraries.
It does NOT import from api/ or auth/.
"""

"""auth/ -- Authentication and authorization package for Store Manager.

Layer rule: auth/ imports from core/, repository/ and third-party libraries.
It does NOT import from api/, services/ or client/.
api/ and services/ import from auth/, not the other way around.
"""

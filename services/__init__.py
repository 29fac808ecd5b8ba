"""services/ -- Business services that consume an authenticated identity.

Layer rule: services/ imports from auth.roles, core/ and repository/ only.
"""

"""storage/ -- Data access contract and its SQLAlchemy implementation.

Layer rule: storage/ imports only core/, auth.roles, and third-party libraries.
repository/ depends on storage.contract.DataManager, never on storage.sql.
"""

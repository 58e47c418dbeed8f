"""Feed Store Backends.

Concrete implementations of the FeedStore interface: in-memory reference
store, JSON snapshot file, and a diskcache (SQLite) embedded database.
"""

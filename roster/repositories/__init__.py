"""
Persistence adapters.

The roster is kept in one named slot of a key-value store. Providers (memory,
JSON file, SQL table) implement ``get``/``set``; ``RosterStorage`` turns the
slot into a list of records and back.
"""

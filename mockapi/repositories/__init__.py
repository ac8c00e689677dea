"""
Persistence adapters.

These modules encapsulate how the store is written to and read from disk.
Services depend on the adapter rather than touching the data file.
"""

"""
Use cases of the MockAPI server.

Routers call these services instead of manipulating the data file directly.
"""

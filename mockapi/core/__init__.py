"""
Core utilities shared across the MockAPI server.

This package hosts the cross-cutting pieces (settings, logging setup,
response helpers and middleware). Routers and services should depend on these
primitives instead of reading os.environ or building responses by hand.
"""

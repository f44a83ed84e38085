"""Core configuration primitives.

Modules in this package are framework-agnostic: schema definition,
validation, immutable views, raw sources and reload handling. Only
``middleware`` depends on FastAPI.
"""

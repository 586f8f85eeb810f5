"""Move selection primitives (description lookup, selection state, view building).

Kept free of FastAPI concerns so it can be reused by API routes, scripts, and tests.
"""

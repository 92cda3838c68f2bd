"""
HTTP API — FastAPI app exposing token, pool, wallet and website safety reports.
"""

"""
HTTP API дашборда (FastAPI)
"""

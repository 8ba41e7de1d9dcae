"""
Research Library Server - Routes Package

FastAPI routers, one module per resource. server.CreateApp mounts them under /api.
"""

"""
API routes package for IndexDrift.
"""
from api.routes import comparison, drift

__all__ = ["comparison", "drift"]

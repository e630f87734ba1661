"""
HTTP API package for IndexDrift.
"""

"""
Company Auth API v1 Endpoints Package

Endpoints:
    - auth.py: OAuth callback, session refresh, profile, logout, check, webhook
"""

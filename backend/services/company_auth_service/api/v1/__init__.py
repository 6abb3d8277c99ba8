"""
Company Auth API v1 Package

Version 1 provides:
    - Signed OAuth callback handling (install/login)
    - Session refresh with provider token rotation
    - Current company profile, logout and session check
    - Provider webhook receiver

All endpoints are served under /auth and report errors as
{"error": <reason>, "message": <text>}.
"""

"""
Company Auth Service API Package

This package contains the API layer for the company auth service.

Package Structure:
    - dependencies.py: Service objects from app.state and the session guard
    - v1/: Version 1 API implementation
        - api.py: Router aggregation
        - endpoints/: API endpoint handlers
        - models/: Pydantic request/response models
"""

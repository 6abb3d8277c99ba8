"""
Company Auth Service Business Logic Package

This package contains the core logic of the company auth service. It is
independent of the API layer.

Modules:
    - hmac_verifier.py: Callback parameter canonicalization and HMAC signatures
    - session_manager.py: Signed session/refresh token pair and its cookies
    - auth_orchestrator.py: Callback handshake and refresh rotation state machines
    - interfaces.py: CompanyStore and AuthorizationServerClient protocols
    - webhook_registry.py: Event type to handler registry
    - errors.py: Error taxonomy rendered as JSON API errors
    - clock.py: Injectable millisecond clock
"""

# =============================================================================
# copilot_core/__init__.py
# Startup Copilot - Persistence and Connection Core
# =============================================================================
"""
Startup Copilot core package.

Sub-packages:
    config      - Settings loaded from environment / Streamlit secrets
    logging     - Centralized logging configuration
    errors      - Closed error taxonomy, classification and UI handlers
    models      - Document dataclasses (Project, UserProfile, ...)
    data        - Backends (Supabase, in-memory) and the generic DocumentStore
    connection  - ConnectionManager with retry and session recovery
    services    - Typed per-entity services built on the DocumentStore
    auth        - Supabase Auth gateway
    ai          - Gemini business advisor
    bootstrap   - Wires everything together once per process
"""

__version__ = "0.1.0"

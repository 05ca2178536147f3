# =============================================================================
# copilot_core/auth/__init__.py
# Authentication
# =============================================================================

from .gateway import AuthGateway, Principal

__all__ = ["AuthGateway", "Principal"]

"""chatlink: client-side session layer for a real-time AI chat service.

Entry point for applications is ``chatlink.session.SessionCoordinator``;
``python -m chatlink`` runs an interactive terminal client.
"""

__version__ = "0.1.0"

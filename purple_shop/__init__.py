"""
Application package for the Purple Shopping backend.

It exposes subpackages for API routers, core utilities, Telegram Mini-App
helpers, domain models, service layer abstractions, and repositories.
"""

"""Business-logic layer. Every operation takes the active `Store`; none branches on backend.

- sites_service.py (registration, join codes, roster, sample sites)
- users_service.py (upsert and lookup)
- alerts_service.py (raise with supersession, list, acknowledge)
- toolbox_talks_service.py (post and list)
"""

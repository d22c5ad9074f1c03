"""Alien Food Push Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - client/: Permission gate, VAPID key provisioner, subscription manager, cleaner
  - worker/: Service worker delivery handler
  - push/: VAPID keys, subscription store, sender
- integration/: Backend API tests through FastAPI's TestClient
"""

"""FastAPI backend for push subscriptions and admin notifications."""

"""Civic domain services, policies and persistence."""

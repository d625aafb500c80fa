"""CivicHub civic-engagement backend."""

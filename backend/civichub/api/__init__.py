"""HTTP routers for the CivicHub API."""

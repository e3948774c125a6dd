"""Institutions feature: institution, user and profile entities and membership workflow."""

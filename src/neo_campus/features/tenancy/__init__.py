"""Tenancy feature: tenant context resolution and the session cache."""

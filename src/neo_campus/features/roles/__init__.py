"""Roles feature: role model, permission evaluation and role assignment."""

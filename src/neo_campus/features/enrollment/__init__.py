"""Enrollment feature: course seat admission control."""

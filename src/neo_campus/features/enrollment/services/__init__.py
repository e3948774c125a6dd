"""Enrollment services module."""

from .admission_controller import EnrollmentAdmissionController

__all__ = ["EnrollmentAdmissionController"]

"""Demo web API emitting governed log events."""

from .patients import Patient, PatientRepository, PatientService
from .routes import init_dependencies, router

__all__ = [
    "Patient",
    "PatientRepository",
    "PatientService",
    "init_dependencies",
    "router",
]

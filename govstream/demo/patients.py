"""Patient lookup demo service and repository.

Both layers log the NPI they handle; governance redacts it downstream, so
callers keep ordinary logging calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..pipeline.provider import LoggingProvider


@dataclass(frozen=True)
class Patient:
    """A patient record returned by the repository."""

    npi: str
    first_name: str
    last_name: str


# Simulated data store (no real database)
_PATIENTS = {
    "1234567890": Patient(npi="1234567890", first_name="Jane", last_name="Doe"),
}


class PatientRepository:
    """Data access layer for patients."""

    def __init__(self, provider: LoggingProvider):
        self._log = provider.get_logger("govstream.demo.PatientRepository")

    def get_by_npi(self, npi: str) -> Patient | None:
        self._log.info("Repository get {topic} {npi}", "NPI", npi)
        return _PATIENTS.get(npi)


class PatientService:
    """Business logic between the HTTP routes and the repository."""

    def __init__(self, provider: LoggingProvider, repository: PatientRepository | None = None):
        self._log = provider.get_logger("govstream.demo.PatientService")
        self._repo = repository or PatientRepository(provider)

    def lookup_by_npi(self, npi: str) -> Patient | None:
        """Look up a patient, logging the inbound NPI and the outcome."""
        self._log.info("Service lookup {topic} {npi}", "NPI", npi)
        result = self._repo.get_by_npi(npi)
        self._log.info("Service result {topic} {found}", "NPI", result is not None)
        return result


__all__ = ["Patient", "PatientRepository", "PatientService"]

"""Request admission adapters.

This package provides a small abstraction layer so the API can start with an
in-memory admission controller and later migrate to a shared store without
changing the HTTP layer.
"""

from catalog_api.adapters.admission.base import AbstractAdmissionController, AdmissionResult
from catalog_api.adapters.admission.in_memory import InMemoryAdmissionController

__all__ = ["AbstractAdmissionController", "AdmissionResult", "InMemoryAdmissionController"]

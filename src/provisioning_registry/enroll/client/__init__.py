from .registry_client import EnrollmentRegistryClient

__all__ = ["EnrollmentRegistryClient"]

"""Request use cases."""

from procurement.application.use_cases.requests.request_operations import RequestService

__all__ = ["RequestService"]

"""Domain value objects."""

from procurement.domain.value_objects.core import Actor, CombinedReference, RequestReference

__all__ = ["Actor", "CombinedReference", "RequestReference"]

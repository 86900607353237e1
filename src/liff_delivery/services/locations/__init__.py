"""Address hierarchy lookups."""

from .form import AddressForm, AddressFormState, InvalidAddressTransition, ResolvedAddress
from .levels import LocationFilter, LocationLevel
from .resolver import AddressHierarchyResolver

__all__ = [
    "AddressForm",
    "AddressFormState",
    "AddressHierarchyResolver",
    "InvalidAddressTransition",
    "LocationFilter",
    "LocationLevel",
    "ResolvedAddress",
]

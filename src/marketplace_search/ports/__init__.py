"""Port interfaces (Protocols).

Application services depend only on these, never on concrete adapters.
No pymongo or other infrastructure imports allowed here.
"""

from .advertisement_store import AdvertisementStorePort
from .id_gen import RequestIdProvider, UuidRequestIdProvider
from .reference_store import ReferenceStorePort

__all__ = [
    "AdvertisementStorePort",
    "ReferenceStorePort",
    "RequestIdProvider",
    "UuidRequestIdProvider",
]

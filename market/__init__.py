"""
Catalog core of the VeggieMarket marketplace: synchronization with the remote
store, the local fallback dataset, product mutations, role resolution, the
buyer cart, and seller orders.
"""

from .catalog_sync import CatalogSnapshot, CatalogState, CatalogSyncController  # noqa: F401
from .mutations import MutationResult, ProductMutationGateway  # noqa: F401
from .roles import resolve_role  # noqa: F401

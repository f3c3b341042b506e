"""Domain layer for ledgerkit application."""

__all__ = [
    "VoucherService",
    "InventoryService",
    "ReferenceDataService",
]


# Services load lazily: utils and database import domain.errors and
# domain.entities, and the services import those layers back.
def __getattr__(name):
    if name == "VoucherService":
        from ledgerkit.domain.voucher import VoucherService
        return VoucherService
    if name == "InventoryService":
        from ledgerkit.domain.inventory import InventoryService
        return InventoryService
    if name == "ReferenceDataService":
        from ledgerkit.domain.reference import ReferenceDataService
        return ReferenceDataService
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

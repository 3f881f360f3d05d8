"""
Demo Manager - Seeds an example model.

Provides a small but representative enterprise model so a first
``bpmap show`` has something to drill into: shared systems across
processes, a vendor used by two sub-processes, and processes that have no
sub-processes yet.
"""

import copy
import logging
from typing import Any, Dict

from .storage.base import StorageAdapter
from .store import EntityStore

logger = logging.getLogger(__name__)


class DemoManager:
    """
    Manages the creation of the demo model.
    """

    SNAPSHOT: Dict[str, Any] = {
        "processes": [
            {
                "id": "p1",
                "name": "Customer Onboarding",
                "subProcesses": [
                    {"id": "sp1", "name": "Identity Verification",
                     "systems": ["s1", "s3", "s5"], "vendors": ["v2"]},
                    {"id": "sp2", "name": "Account Setup",
                     "systems": ["s1", "s5"], "vendors": []},
                ],
            },
            {
                "id": "p2",
                "name": "Order Processing",
                "subProcesses": [
                    {"id": "sp3", "name": "Order Validation",
                     "systems": ["s2", "s5"], "vendors": ["v1"]},
                    {"id": "sp4", "name": "Payment Capture",
                     "systems": ["s2"], "vendors": ["v2"]},
                ],
            },
            {"id": "p3", "name": "Inventory Management", "subProcesses": []},
            {"id": "p4", "name": "Financial Reporting", "subProcesses": []},
        ],
        "systems": [
            {"id": "s1", "name": "CRM System"},
            {"id": "s2", "name": "ERP Platform"},
            {"id": "s3", "name": "Customer Portal"},
            {"id": "s4", "name": "Business Intelligence Tool"},
            {"id": "s5", "name": "Enterprise Core System"},
        ],
        "vendors": [
            {"id": "v1", "name": "Cloud Provider"},
            {"id": "v2", "name": "Payment Gateway"},
            {"id": "v3", "name": "Logistics Partner"},
        ],
    }

    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    @classmethod
    def snapshot(cls) -> Dict[str, Any]:
        return copy.deepcopy(cls.SNAPSHOT)

    @classmethod
    def build_store(cls) -> EntityStore:
        return EntityStore.from_snapshot(cls.snapshot())

    def provision(self, force: bool = False) -> bool:
        """
        Write the demo model to storage.

        Returns False without touching storage when a model already exists
        and ``force`` is not set.
        """
        if self.storage.exists() and not force:
            logger.info("Storage %s already holds a model, skipping demo", self.storage.describe())
            return False
        self.storage.save(self.build_store().export())
        logger.info("Demo model written to %s", self.storage.describe())
        return True

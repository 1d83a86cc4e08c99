"""
JSON file implementation of OrderRepository port.

Orders are kept in memory and persisted as one JSON document mapping order
id to record. Every write replaces the file atomically (temp file, fsync,
``os.replace``), so a reader never sees a partially written document.

A document that cannot be parsed is never replaced by an empty store: the
repository flags itself degraded and fails every operation until an
operator repairs the file.
"""
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from asgiref.sync import sync_to_async

from core.domain.exceptions import (
    DomainException,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderStoreError,
    StoreCorruptionError,
)
from core.domain.value_objects import Email, LicenseType, MachineId, OrderStatus
from orders.domain.order import Order
from orders.infrastructure.locks import KeyedLock
from orders.ports.order_repository import OrderRepository, OrderTransform

logger = logging.getLogger(__name__)


def order_to_record(order: Order) -> Dict[str, Any]:
    """Serialize an order to a JSON-compatible record."""
    return {
        "id": order.id,
        "machineId": str(order.machine_id),
        "email": str(order.email),
        "type": order.license_type.value,
        "amount": str(order.amount),
        "status": order.status.value,
        "licenseKey": order.license_key,
        "createdAt": order.created_at.isoformat(),
        "updatedAt": order.updated_at.isoformat(),
        "notifiedAt": order.notified_at.isoformat() if order.notified_at else None,
    }


def order_from_record(order_id: str, record: Dict[str, Any]) -> Order:
    """
    Deserialize an order record.

    Raises:
        StoreCorruptionError: If the record is incomplete or inconsistent
    """
    try:
        notified_at = record.get("notifiedAt")
        return Order(
            id=order_id,
            machine_id=MachineId(record["machineId"]),
            email=Email(record["email"]),
            license_type=LicenseType(record["type"]),
            amount=Decimal(str(record["amount"])),
            status=OrderStatus(record["status"]),
            license_key=record.get("licenseKey"),
            created_at=datetime.fromisoformat(record["createdAt"]),
            updated_at=datetime.fromisoformat(record["updatedAt"]),
            notified_at=datetime.fromisoformat(notified_at) if notified_at else None,
        )
    except (KeyError, TypeError, ValueError, ArithmeticError, DomainException) as exc:
        raise StoreCorruptionError(f"Order {order_id} cannot be read: {exc}") from exc


class JsonFileOrderRepository(OrderRepository):
    """
    File-backed OrderRepository.

    Work runs in worker threads (``thread_sensitive=False``); a per-id lock
    serializes operations on one order and a store lock guards the shared
    mapping and the file.
    """

    def __init__(self, path, locks: Optional[KeyedLock] = None):
        """
        Initialize repository.

        Args:
            path: Location of the JSON document
            locks: Optional shared lock registry
        """
        self._path = Path(path)
        self._locks = locks or KeyedLock()
        self._store_lock = threading.RLock()
        self._orders: Optional[Dict[str, Order]] = None
        self._degraded_reason: Optional[str] = None

    @property
    def path(self) -> Path:
        """Return the location of the JSON document."""
        return self._path

    @property
    def is_degraded(self) -> bool:
        """Check if the persisted data could not be loaded."""
        return self._degraded_reason is not None

    def _load(self) -> Dict[str, Order]:
        """Return the in-memory mapping, loading it on first use."""
        if self._degraded_reason:
            raise StoreCorruptionError(self._degraded_reason)
        if self._orders is not None:
            return self._orders

        if not self._path.exists():
            self._orders = {}
            return self._orders

        try:
            document = json.loads(self._path.read_text(encoding="utf-8") or "{}")
            if not isinstance(document, dict):
                raise ValueError("top-level value is not an object")
            orders = {
                order_id: order_from_record(order_id, record)
                for order_id, record in document.items()
            }
        except (OSError, ValueError, StoreCorruptionError) as exc:
            self._degraded_reason = f"Order store {self._path} is unreadable: {exc}"
            logger.critical(self._degraded_reason, extra={"operation": "load"})
            raise StoreCorruptionError(self._degraded_reason) from exc

        logger.info("Loaded %d order(s) from %s", len(orders), self._path)
        self._orders = orders
        return self._orders

    def _flush(self, orders: Dict[str, Order]) -> None:
        """Write the mapping to disk atomically."""
        document = {order_id: order_to_record(order) for order_id, order in orders.items()}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _commit(self, order_id: str, order: Optional[Order], operation: str) -> None:
        """
        Apply one change to the mapping and persist it.

        The in-memory mapping is only updated when the file write succeeds.
        """
        with self._store_lock:
            orders = dict(self._load())
            if order is None:
                orders.pop(order_id, None)
            else:
                orders[order_id] = order
            try:
                self._flush(orders)
            except OSError as exc:
                logger.error(
                    "Failed to persist order %s: %s",
                    order_id,
                    exc,
                    extra={"order_id": order_id, "operation": operation},
                    exc_info=True,
                )
                raise OrderStoreError(f"Could not persist order {order_id}") from exc
            self._orders = orders

    def _current(self, order_id: str) -> Optional[Order]:
        with self._store_lock:
            return self._load().get(order_id)

    @sync_to_async(thread_sensitive=False)
    def create(self, order: Order) -> Order:
        """
        Persist a new order.

        Args:
            order: Order entity to create

        Returns:
            Created order entity
        """
        with self._locks.hold(order.id):
            if self._current(order.id) is not None:
                raise OrderAlreadyExistsError(f"Order {order.id} already exists")
            self._commit(order.id, order, "create")
        return order

    @sync_to_async(thread_sensitive=False)
    def get(self, order_id: str) -> Order:
        """
        Get an order by id.

        Args:
            order_id: Order id

        Returns:
            Order entity
        """
        order = self._current(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return order

    @sync_to_async(thread_sensitive=False)
    def mutate(self, order_id: str, transform: OrderTransform) -> Order:
        """
        Read-modify-write one order under its exclusive lock.

        Args:
            order_id: Order id
            transform: Function from the current order to the new order

        Returns:
            Order entity as stored after the call
        """
        with self._locks.hold(order_id):
            current = self._current(order_id)
            if current is None:
                raise OrderNotFoundError(f"Order {order_id} not found")
            updated = transform(current)
            if updated is current:
                return current
            self._commit(order_id, updated, "mutate")
        return updated

    @sync_to_async(thread_sensitive=False)
    def delete(self, order_id: str) -> bool:
        """
        Delete an order.

        Args:
            order_id: Order id

        Returns:
            True if the order existed, False otherwise
        """
        with self._locks.hold(order_id):
            if self._current(order_id) is None:
                return False
            self._commit(order_id, None, "delete")
        return True

    @sync_to_async(thread_sensitive=False)
    def list(self) -> List[Order]:
        """
        List all orders, newest first.

        Returns:
            List of Order entities
        """
        with self._store_lock:
            orders = list(self._load().values())
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    @sync_to_async(thread_sensitive=False)
    def count(self) -> int:
        """
        Count stored orders.

        Returns:
            Number of orders
        """
        with self._store_lock:
            return len(self._load())

"""
Ownership graph and the one routine that deletes along it.

OWNERSHIP says, for every parent table, which rows depend on it and through
which column. cascade_delete() walks that graph from one root row, collects
every dependent id, and deletes table by table in an order derived from the
graph (children before parents), inside the caller's transaction.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from .database_models import Customer, Invoice, InvoiceLineItem, Photo, ScheduleEntry, Task, Vehicle
from .models.photo import PhotoParentType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    child: type
    column: str
    # Photos point at their parent with (parent_type, parent_id) instead of a FK
    parent_type: Optional[PhotoParentType] = None
    # When the parent is the row being deleted, clear the reference instead
    # of deleting the child (its own dependents are still deleted)
    detach_at_root: bool = False


OWNERSHIP: Dict[type, tuple] = {
    Customer: (
        Edge(Photo, "parent_id", parent_type=PhotoParentType.CUSTOMER),
        Edge(Vehicle, "customer_id"),
        Edge(Task, "customer_id"),
        Edge(Invoice, "customer_id"),
    ),
    Vehicle: (
        Edge(Photo, "parent_id", parent_type=PhotoParentType.VEHICLE),
        Edge(Task, "vehicle_id"),
    ),
    Task: (
        Edge(Photo, "parent_id", parent_type=PhotoParentType.TASK),
        Edge(ScheduleEntry, "task_id"),
        # Invoices outlive a deleted task (billing history); only their line items go
        Edge(Invoice, "task_id", detach_at_root=True),
    ),
    Invoice: (
        Edge(InvoiceLineItem, "invoice_id"),
    ),
}


def deletion_order(graph: Dict[type, tuple] = OWNERSHIP) -> List[type]:
    """Every table in the graph, each one listed before any of its parents."""
    order: List[type] = []
    visiting: Set[type] = set()

    def visit(kind: type) -> None:
        if kind in order:
            return
        if kind in visiting:
            raise ValueError(f"Ownership graph has a cycle through {kind.__tablename__}")
        visiting.add(kind)
        for edge in graph.get(kind, ()):
            visit(edge.child)
        visiting.discard(kind)
        order.append(kind)

    for parent in graph:
        visit(parent)
    return order


DELETION_ORDER = deletion_order()


@dataclass
class CascadePlan:
    delete: Dict[type, Set[str]] = field(default_factory=lambda: defaultdict(set))
    detach: Dict[Edge, Set[str]] = field(default_factory=lambda: defaultdict(set))


def _dependent_ids(session: Session, edge: Edge, parent_ids: Set[str]) -> Set[str]:
    table = edge.child.__table__
    query = select(table.c.id).where(table.c[edge.column].in_(parent_ids))
    if edge.parent_type is not None:
        query = query.where(table.c.parent_type == edge.parent_type.value)
    return set(session.execute(query).scalars())


def collect(session: Session, root: type, root_id: str, graph: Dict[type, tuple] = OWNERSHIP) -> CascadePlan:
    """Walks the graph breadth-first from one row and plans what to delete or detach."""
    plan = CascadePlan()
    plan.delete[root].add(root_id)
    pending = deque([(root, {root_id}, True)])

    while pending:
        kind, ids, at_root = pending.popleft()
        for edge in graph.get(kind, ()):
            child_ids = _dependent_ids(session, edge, ids)
            if not child_ids:
                continue
            if at_root and edge.detach_at_root:
                plan.detach[edge] |= child_ids
                pending.append((edge.child, child_ids, False))
                continue
            new_ids = child_ids - plan.delete[edge.child]
            if new_ids:
                plan.delete[edge.child] |= new_ids
                pending.append((edge.child, new_ids, False))
    return plan


def cascade_delete(session: Session, root: type, root_id: str) -> Dict[str, int]:
    """
    Deletes one row and everything that depends on it.

    Must run inside a transaction owned by the caller; a failing statement
    leaves nothing applied once that transaction rolls back.
    Returns rows deleted per table name (the root table included).
    """
    plan = collect(session, root, root_id)

    # 1. Clear references from rows that survive (e.g. invoices of a deleted task)
    for edge, ids in plan.detach.items():
        ids = ids - plan.delete[edge.child]
        if ids:
            table = edge.child.__table__
            session.execute(update(table).where(table.c.id.in_(ids)).values({edge.column: None}))

    # 2. Delete children before parents
    counts: Dict[str, int] = {}
    for kind in DELETION_ORDER:
        ids = plan.delete.get(kind)
        if not ids:
            continue
        table = kind.__table__
        result = session.execute(delete(table).where(table.c.id.in_(ids)))
        counts[kind.__tablename__] = result.rowcount

    logger.info("Cascade delete of %s %s: %s", root.__tablename__, root_id, counts)
    return counts

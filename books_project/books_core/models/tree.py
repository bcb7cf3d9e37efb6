from django.core.exceptions import ValidationError
from ..exceptions import TreeCycleError


class TreeNodeMixin:
    """
    Helpers for per-business trees stored as ``parent`` references
    (account groups, cost centers).

    The tree is walked by id through the database, so the check sees the
    committed shape of the tree and not stale in-memory parents.
    """

    def ancestor_ids(self, start_id=None):
        """Ids from ``start_id`` (default: own parent) up to the root."""
        ids = []
        current = self.parent_id if start_id is None else start_id
        manager = type(self)._base_manager
        while current is not None and current not in ids:
            ids.append(current)
            current = manager.filter(pk=current).values_list("parent_id", flat=True).first()
        return ids

    def root(self):
        ids = self.ancestor_ids()
        if not ids:
            return self
        return type(self)._base_manager.get(pk=ids[-1])

    def descendant_ids(self):
        """Ids of every node below this one."""
        manager = type(self)._base_manager
        found, frontier = [], [self.pk]
        while frontier:
            children = list(
                manager.filter(parent_id__in=frontier).values_list("pk", flat=True)
            )
            children = [c for c in children if c not in found]
            found.extend(children)
            frontier = children
        return found

    def clean_parent(self):
        """Reject foreign-business parents and parents that would close a loop."""
        if self.parent_id is None:
            return
        if self.parent.business_id != self.business_id:
            raise ValidationError({"parent": "Parent must belong to the same business."})
        if self.pk is not None and self.pk in self.ancestor_ids():
            raise TreeCycleError(
                f"Moving {self} under {self.parent} would create a cycle."
            )

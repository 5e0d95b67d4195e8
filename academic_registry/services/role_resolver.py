"""
Caller role resolution.
"""

from ..core.enums import Role
from ..persistence.store import RegistryStore
from .base import RegistryService


def resolve_role(store: RegistryStore, owner: str, caller: str) -> Role:
    """Map ``caller`` to exactly one role.

    Precedence is owner, then student, then institution, then viewer.
    """
    if caller == owner:
        return Role.OWNER
    if store.has_student(caller):
        return Role.STUDENT
    if store.has_institution(caller):
        return Role.INSTITUTION
    return Role.VIEWER


class RoleResolver(RegistryService):
    """Resolves caller roles against committed state."""

    def get_permission(self, caller: str) -> Role:
        with self._concurrency_manager.read():
            return resolve_role(self._store, self._owner, caller)

"""Access gate consulted by every protected operation.

Two independent decision axes:
  - level-based: the (resource, level) matrix held by PermissionService
  - identity-based: the cost-input allow-list (CostInputPolicy)
Both deny by default. Storage errors raised while loading the matrix are not
turned into denials; they propagate and fail the request.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from wkshop.config.cost_input import CostInputPolicy
from wkshop.constants.permissions import ACTIONS, LEVEL_SUPER_ADMIN, RESOURCE_PERMISSIONS
from wkshop.errors import AuthorizationDenied, ValidationError
from wkshop.services.permissions import PermissionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated actor: admin account id plus its level tag."""
    id: str
    level: Optional[str] = None


class AccessGate:
    def __init__(self, permissions: PermissionService, cost_policy: CostInputPolicy):
        self._permissions = permissions
        self._cost_policy = cost_policy

    @property
    def cost_policy(self) -> CostInputPolicy:
        return self._cost_policy

    def authorize(self, level: Optional[str], resource: str, action: str) -> bool:
        if action not in ACTIONS:
            raise ValidationError(f'Unknown action: {action}')
        if not level:
            return False
        # super admin administers the matrix until a stored row for it says otherwise
        if level == LEVEL_SUPER_ADMIN and resource == RESOURCE_PERMISSIONS:
            if not self._permissions.is_configured(level, resource):
                return True
        return self._permissions.can(level, resource, action)

    def is_cost_input_allowed(self, user_id: Optional[str]) -> bool:
        return self._cost_policy.allows(user_id)

    def require(self, principal: Optional[Principal], resource: str, action: str) -> None:
        level = principal.level if principal else None
        if not self.authorize(level, resource, action):
            logger.info('denied %s on %s for %s', action, resource, principal.id if principal else None)
            raise AuthorizationDenied()

    def require_cost_input(self, principal: Optional[Principal]) -> None:
        if not self.is_cost_input_allowed(principal.id if principal else None):
            logger.info('denied cost input for %s', principal.id if principal else None)
            raise AuthorizationDenied()

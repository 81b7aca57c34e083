"""Central definitions for admin levels, actions and protected resources.
Level tags are stored verbatim in permission_settings.level; never rename one
without a data migration.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

LEVEL_SUPER_ADMIN = 'A-SuperAdmin'
LEVEL_ADMIN = 'S: Admin'
LEVEL_CHINA_ADMIN = 'B0: 중국Admin'
LEVEL_KOREA_ADMIN = 'C0: 한국Admin'
LEVEL_VISION = 'D0: 비전 담당자'

# Opaque tags, no ordering between them
ADMIN_LEVELS: Tuple[str, ...] = (
    LEVEL_SUPER_ADMIN,
    LEVEL_ADMIN,
    LEVEL_CHINA_ADMIN,
    LEVEL_KOREA_ADMIN,
    LEVEL_VISION,
)

# Level assigned to new accounts when none is given
DEFAULT_LEVEL = LEVEL_KOREA_ADMIN

ACTION_READ = 'read'
ACTION_WRITE = 'write'
ACTION_DELETE = 'delete'
ACTIONS: Tuple[str, ...] = (ACTION_READ, ACTION_WRITE, ACTION_DELETE)

ACTION_FLAGS: Dict[str, str] = {
    ACTION_READ: 'can_read',
    ACTION_WRITE: 'can_write',
    ACTION_DELETE: 'can_delete',
}
FLAG_NAMES: Tuple[str, ...] = tuple(ACTION_FLAGS.values())

RESOURCE_PERMISSIONS = 'permissions'
RESOURCE_PURCHASE_ORDERS = 'purchase_orders'

# Resources shown in the admin matrix; storage accepts any resource string
KNOWN_RESOURCES: List[str] = [
    RESOURCE_PURCHASE_ORDERS,
    'packing_lists',
    'payment_history',
    'materials',
    'projects',
    'gallery',
    'china_warehouse',
    'invoice',
    'packaging_work',
    'orders',
    'shipping',
    'payment',
    'inventory',
    'members',
    'admin_accounts',
    RESOURCE_PERMISSIONS,
]

MAX_RESOURCE_LENGTH = 64

# Seed presets: level -> (can_read, can_write, can_delete) applied to every known resource.
# Super admin is also always allowed on RESOURCE_PERMISSIONS (see AccessGate).
LEVEL_PRESETS: Dict[str, Tuple[bool, bool, bool]] = {
    LEVEL_SUPER_ADMIN: (True, True, True),
    LEVEL_ADMIN: (True, True, False),
    LEVEL_CHINA_ADMIN: (True, True, False),
    LEVEL_KOREA_ADMIN: (True, True, False),
    LEVEL_VISION: (True, False, False),
}

# Resources only the super admin may touch in the seeded matrix
SUPER_ADMIN_ONLY = {RESOURCE_PERMISSIONS, 'admin_accounts'}


def build_default_settings() -> List[Dict[str, object]]:
    """Expand LEVEL_PRESETS into flat setting dicts for seeding."""
    out: List[Dict[str, object]] = []
    for resource in KNOWN_RESOURCES:
        for level in ADMIN_LEVELS:
            can_read, can_write, can_delete = LEVEL_PRESETS[level]
            if resource in SUPER_ADMIN_ONLY and level != LEVEL_SUPER_ADMIN:
                can_read = can_write = can_delete = False
            out.append({
                'resource': resource,
                'level': level,
                'can_read': can_read,
                'can_write': can_write,
                'can_delete': can_delete,
            })
    return out

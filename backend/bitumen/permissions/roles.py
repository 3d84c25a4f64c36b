# Overview: User roles and the grant sets an administrator can apply when onboarding.

from __future__ import annotations

import enum

from .modules import Action, Module


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    SALES_MANAGER = "SALES_MANAGER"
    SALES_EXECUTIVE = "SALES_EXECUTIVE"
    OPERATIONS = "OPERATIONS"
    EMPLOYEE = "EMPLOYEE"


def parse_role(value) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown role: {value}") from None


_ALL_ACTIONS = (Action.VIEW, Action.ADD, Action.EDIT, Action.DELETE)
_VIEW_ADD_EDIT = (Action.VIEW, Action.ADD, Action.EDIT)

# Starting grants per role. ADMIN is absent because administrators bypass
# grant checks entirely. Nothing here is applied implicitly: users start
# with no grants unless an administrator applies these defaults.
DEFAULT_ROLE_GRANTS: dict[Role, dict[Module, tuple[Action, ...]]] = {
    Role.SALES_MANAGER: {
        Module.DASHBOARD: (Action.VIEW,),
        Module.CLIENT_MANAGEMENT: _ALL_ACTIONS,
        Module.CLIENT_TRACKING: (Action.VIEW,),
        Module.ORDER_WORKFLOW: _ALL_ACTIONS,
        Module.PURCHASE_ORDERS: _VIEW_ADD_EDIT,
        Module.SALES: _ALL_ACTIONS,
        Module.CREDIT_PAYMENTS: _VIEW_ADD_EDIT,
        Module.CREDIT_AGREEMENTS: _VIEW_ADD_EDIT,
        Module.SALES_RATES: _ALL_ACTIONS,
        Module.TASK_MANAGEMENT: _ALL_ACTIONS,
        Module.FOLLOW_UP_HUB: _ALL_ACTIONS,
        Module.TEAM_PERFORMANCE: (Action.VIEW,),
        Module.TOUR_ADVANCE: _VIEW_ADD_EDIT,
        Module.TA_REPORTS: (Action.VIEW,),
    },
    Role.SALES_EXECUTIVE: {
        Module.DASHBOARD: (Action.VIEW,),
        Module.CLIENT_MANAGEMENT: _VIEW_ADD_EDIT,
        Module.ORDER_WORKFLOW: (Action.VIEW, Action.ADD),
        Module.SALES: _VIEW_ADD_EDIT,
        Module.SALES_RATES: (Action.VIEW, Action.ADD),
        Module.TASK_MANAGEMENT: _VIEW_ADD_EDIT,
        Module.FOLLOW_UP_HUB: _VIEW_ADD_EDIT,
        Module.TOUR_ADVANCE: (Action.VIEW, Action.ADD),
    },
    Role.OPERATIONS: {
        Module.DASHBOARD: (Action.VIEW,),
        Module.ORDER_WORKFLOW: _VIEW_ADD_EDIT,
        Module.CLIENT_TRACKING: _VIEW_ADD_EDIT,
        Module.EWAY_BILLS: _ALL_ACTIONS,
        Module.TASK_MANAGEMENT: _VIEW_ADD_EDIT,
        Module.MASTER_DATA: (Action.VIEW,),
    },
    Role.EMPLOYEE: {
        Module.DASHBOARD: (Action.VIEW,),
        Module.TASK_MANAGEMENT: (Action.VIEW,),
        Module.TOUR_ADVANCE: (Action.VIEW, Action.ADD),
    },
}

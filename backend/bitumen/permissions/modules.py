# Overview: Closed vocabularies for permission grants: functional modules and actions.

from __future__ import annotations

import enum


class Module(str, enum.Enum):
    """Functional areas of the application; the unit of permission granting."""

    DASHBOARD = "DASHBOARD"
    CLIENT_MANAGEMENT = "CLIENT_MANAGEMENT"
    CLIENT_TRACKING = "CLIENT_TRACKING"
    ORDER_WORKFLOW = "ORDER_WORKFLOW"
    SALES = "SALES"
    SALES_OPERATIONS = "SALES_OPERATIONS"
    PURCHASE_ORDERS = "PURCHASE_ORDERS"
    TASK_MANAGEMENT = "TASK_MANAGEMENT"
    FOLLOW_UP_HUB = "FOLLOW_UP_HUB"
    LEAD_FOLLOW_UP_HUB = "LEAD_FOLLOW_UP_HUB"
    CREDIT_PAYMENTS = "CREDIT_PAYMENTS"
    CREDIT_AGREEMENTS = "CREDIT_AGREEMENTS"
    EWAY_BILLS = "EWAY_BILLS"
    SALES_RATES = "SALES_RATES"
    TEAM_PERFORMANCE = "TEAM_PERFORMANCE"
    TOUR_ADVANCE = "TOUR_ADVANCE"
    TA_REPORTS = "TA_REPORTS"
    MASTER_DATA = "MASTER_DATA"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    PRICING = "PRICING"


class Action(str, enum.Enum):
    """Independent actions; no action implies another."""

    VIEW = "VIEW"
    ADD = "ADD"
    EDIT = "EDIT"
    DELETE = "DELETE"


MODULE_LABELS = {
    Module.DASHBOARD: "Dashboard",
    Module.CLIENT_MANAGEMENT: "Client Management",
    Module.CLIENT_TRACKING: "Client Tracking",
    Module.ORDER_WORKFLOW: "Order Workflow",
    Module.SALES: "Sales",
    Module.SALES_OPERATIONS: "Sales Operations",
    Module.PURCHASE_ORDERS: "Purchase Orders",
    Module.TASK_MANAGEMENT: "Task Management",
    Module.FOLLOW_UP_HUB: "Follow-up Hub",
    Module.LEAD_FOLLOW_UP_HUB: "Lead Follow-up Hub",
    Module.CREDIT_PAYMENTS: "Credit Payments",
    Module.CREDIT_AGREEMENTS: "Credit Agreements",
    Module.EWAY_BILLS: "E-way Bills",
    Module.SALES_RATES: "Sales Rates",
    Module.TEAM_PERFORMANCE: "Team Performance",
    Module.TOUR_ADVANCE: "Tour Advance",
    Module.TA_REPORTS: "TA Reports",
    Module.MASTER_DATA: "Master Data",
    Module.USER_MANAGEMENT: "User Management",
    Module.PRICING: "Pricing",
}


def parse_module(value) -> Module:
    """Parse a module name; raises ValueError for names outside the vocabulary."""
    if isinstance(value, Module):
        return value
    try:
        return Module(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown module: {value}") from None


def parse_action(value) -> Action:
    """Parse an action name; raises ValueError for names outside the vocabulary."""
    if isinstance(value, Action):
        return value
    try:
        return Action(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown action: {value}") from None

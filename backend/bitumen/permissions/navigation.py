"""
Sidebar menu definition and per-user pruning.

The menu is two levels deep: top-level items, then named sections of items.
Items that declare a module are shown only to users who may VIEW that
module; items without a module are always shown. Sections left empty after
filtering are dropped. Filtering builds new objects and never touches MENU.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .modules import Action, Module


@dataclass(frozen=True)
class MenuItem:
    label: str
    path: str
    module: Optional[Module] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "path": self.path,
            "module": self.module.value if self.module else None,
        }


@dataclass(frozen=True)
class MenuSection:
    title: str
    items: tuple[MenuItem, ...]

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class Menu:
    items: tuple[MenuItem, ...]
    sections: tuple[MenuSection, ...]

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "sections": [section.to_dict() for section in self.sections],
        }


MENU = Menu(
    items=(
        MenuItem("Dashboard", "/", Module.DASHBOARD),
        MenuItem("My Profile", "/profile"),
    ),
    sections=(
        MenuSection("PAYMENTS", (
            MenuItem("Credit Payments", "/credit-payments", Module.CREDIT_PAYMENTS),
            MenuItem("Payment Alerts", "/payment-alerts", Module.CREDIT_PAYMENTS),
        )),
        MenuSection("CLIENTS", (
            MenuItem("Client Management", "/clients", Module.CLIENT_MANAGEMENT),
            MenuItem("Client Tracking", "/client-tracking", Module.CLIENT_TRACKING),
            MenuItem("Sales Rates", "/sales-rates", Module.SALES_RATES),
        )),
        MenuSection("OPERATIONS", (
            MenuItem("Task Management", "/tasks", Module.TASK_MANAGEMENT),
            MenuItem("Follow-up Hub", "/follow-ups", Module.FOLLOW_UP_HUB),
            MenuItem("Lead Follow-up Hub", "/lead-follow-ups", Module.LEAD_FOLLOW_UP_HUB),
            MenuItem("Order Workflow", "/orders", Module.ORDER_WORKFLOW),
            MenuItem("Credit Agreements", "/credit-agreements", Module.CREDIT_AGREEMENTS),
            MenuItem("E-Way Bills", "/eway-bills", Module.EWAY_BILLS),
            MenuItem("Tour Advance", "/tour-advance", Module.TOUR_ADVANCE),
            MenuItem("TA Reports", "/ta-reports", Module.TA_REPORTS),
        )),
        MenuSection("SALES", (
            MenuItem("Sales", "/sales", Module.SALES),
            MenuItem("Sales Operations", "/sales-operations", Module.SALES_OPERATIONS),
            MenuItem("Purchase Orders", "/purchase-orders", Module.PURCHASE_ORDERS),
            MenuItem("Team Performance", "/team-performance", Module.TEAM_PERFORMANCE),
            MenuItem("Pricing Plans", "/pricing", Module.PRICING),
        )),
        MenuSection("ADMIN", (
            MenuItem("Master Data", "/master-data", Module.MASTER_DATA),
            MenuItem("Tally Integration", "/tally", Module.MASTER_DATA),
            MenuItem("User Management", "/users", Module.USER_MANAGEMENT),
        )),
    ),
)


def filter_menu(menu: Menu, user, check: Optional[Callable] = None) -> Menu:
    """
    Return a pruned copy of `menu` for `user`.

    check(user, module, action) defaults to permission_service.has_permission;
    tests pass a plain function to exercise the pruning without a database.
    """
    if check is None:
        from bitumen.services.permission_service import has_permission as check

    def visible(item: MenuItem) -> bool:
        return item.module is None or check(user, item.module, Action.VIEW)

    items = tuple(item for item in menu.items if visible(item))
    sections = []
    for section in menu.sections:
        kept = tuple(item for item in section.items if visible(item))
        if kept:
            sections.append(MenuSection(section.title, kept))
    return Menu(items=items, sections=tuple(sections))

"""
Navigation filter tests.

filter_menu is checked with a plain permission function first (no
database), then through the real resolver.
"""

import pytest

from bitumen.permissions import MENU, Action, Menu, MenuItem, MenuSection, Module, filter_menu
from bitumen.services import permission_service


def allow(*pairs):
    allowed = set(pairs)

    def check(user, module, action):
        return (module, action) in allowed

    return check


def labels(menu: Menu):
    return [item.label for item in menu.items], {
        section.title: [item.label for item in section.items] for section in menu.sections
    }


SMALL_MENU = Menu(
    items=(
        MenuItem("Dashboard", "/", Module.DASHBOARD),
        MenuItem("My Profile", "/profile"),
    ),
    sections=(
        MenuSection("CLIENTS", (
            MenuItem("Client Management", "/clients", Module.CLIENT_MANAGEMENT),
            MenuItem("Sales Rates", "/sales-rates", Module.SALES_RATES),
            MenuItem("Client Tracking", "/client-tracking", Module.CLIENT_TRACKING),
        )),
        MenuSection("ADMIN", (
            MenuItem("User Management", "/users", Module.USER_MANAGEMENT),
        )),
        MenuSection("HELP", (
            MenuItem("Docs", "/docs"),
        )),
    ),
)


class TestFilterMenu:
    def test_items_without_module_always_visible(self):
        pruned = filter_menu(SMALL_MENU, user=None, check=allow())
        items, sections = labels(pruned)
        assert items == ["My Profile"]
        assert sections == {"HELP": ["Docs"]}

    def test_empty_sections_are_dropped(self):
        pruned = filter_menu(SMALL_MENU, None, check=allow((Module.SALES_RATES, Action.VIEW)))
        _, sections = labels(pruned)
        assert "ADMIN" not in sections
        assert sections["CLIENTS"] == ["Sales Rates"]

    def test_order_is_preserved(self):
        check = allow(
            (Module.CLIENT_TRACKING, Action.VIEW),
            (Module.CLIENT_MANAGEMENT, Action.VIEW),
        )
        pruned = filter_menu(SMALL_MENU, None, check=check)
        _, sections = labels(pruned)
        assert sections["CLIENTS"] == ["Client Management", "Client Tracking"]
        assert [s.title for s in pruned.sections] == ["CLIENTS", "HELP"]

    def test_only_view_counts(self):
        check = allow((Module.USER_MANAGEMENT, Action.EDIT), (Module.USER_MANAGEMENT, Action.ADD))
        _, sections = labels(filter_menu(SMALL_MENU, None, check=check))
        assert "ADMIN" not in sections

    def test_source_menu_is_not_mutated(self):
        before = SMALL_MENU.to_dict()
        filter_menu(SMALL_MENU, None, check=allow())
        assert SMALL_MENU.to_dict() == before

    def test_every_remaining_section_has_items(self):
        pruned = filter_menu(MENU, None, check=allow((Module.TA_REPORTS, Action.VIEW)))
        assert all(section.items for section in pruned.sections)
        assert [s.title for s in pruned.sections] == ["OPERATIONS"]


class TestMenuWithResolver:
    def test_admin_sees_whole_menu(self, admin):
        assert filter_menu(MENU, admin).to_dict() == MENU.to_dict()

    def test_user_without_grants_sees_profile_only(self, sales_exec):
        pruned = filter_menu(MENU, sales_exec)
        assert [i.label for i in pruned.items] == ["My Profile"]
        assert pruned.sections == ()

    @pytest.mark.parametrize("module", [m for m in Module])
    def test_visible_items_satisfy_view_grant(self, sales_exec, module):
        permission_service.grant(sales_exec, module, Action.VIEW)
        pruned = filter_menu(MENU, sales_exec)
        for item in pruned.items + tuple(i for s in pruned.sections for i in s.items):
            assert item.module is None or item.module == module

from .modules import Action, Module, MODULE_LABELS, parse_action, parse_module
from .navigation import MENU, Menu, MenuItem, MenuSection, filter_menu
from .roles import DEFAULT_ROLE_GRANTS, Role, parse_role

__all__ = [
    'Action', 'Module', 'MODULE_LABELS', 'parse_action', 'parse_module',
    'MENU', 'Menu', 'MenuItem', 'MenuSection', 'filter_menu',
    'DEFAULT_ROLE_GRANTS', 'Role', 'parse_role',
]

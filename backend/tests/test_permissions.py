"""
Permission resolver tests.

Verifies:
- Administrators pass every module/action regardless of grant rows
- Non-administrators are denied without a row, and with granted=False
- Actions are independent of each other
- set_grants replaces, list_grants reports
"""

import pytest

from bitumen.extensions import db
from bitumen.models import UserPermission
from bitumen.permissions import Action, Module, Role
from bitumen.services import permission_service
from bitumen.services.permission_service import PermissionDeniedError, has_permission, require_permission
from bitumen.validation import ValidationError

from conftest import make_user


class TestAdministratorBypass:
    @pytest.mark.parametrize("module", list(Module))
    def test_admin_has_every_action(self, admin, module):
        for action in Action:
            assert has_permission(admin, module, action)

    def test_admin_ignores_explicit_revoke(self, admin):
        db.session.add(UserPermission(
            user_id=admin.id, module=Module.USER_MANAGEMENT.value, action="VIEW", granted=False
        ))
        db.session.commit()
        assert has_permission(admin, Module.USER_MANAGEMENT, Action.VIEW)

    def test_admin_grant_list_is_full_matrix(self, admin):
        grants = permission_service.list_grants(admin)
        assert len(grants) == len(Module) * len(Action)
        assert all(g["granted"] for g in grants)


class TestDefaultDeny:
    @pytest.mark.parametrize("module", list(Module))
    def test_no_rows_means_denied(self, sales_exec, module):
        for action in Action:
            assert not has_permission(sales_exec, module, action)

    def test_granted_false_is_denied(self, sales_exec):
        permission_service.grant(sales_exec, Module.CLIENT_MANAGEMENT, Action.VIEW, granted=False)
        assert not has_permission(sales_exec, Module.CLIENT_MANAGEMENT, Action.VIEW)

    def test_actions_are_independent(self, sales_exec):
        permission_service.grant(sales_exec, Module.ORDER_WORKFLOW, Action.EDIT)
        assert has_permission(sales_exec, Module.ORDER_WORKFLOW, Action.EDIT)
        assert not has_permission(sales_exec, Module.ORDER_WORKFLOW, Action.VIEW)
        assert not has_permission(sales_exec, Module.ORDER_WORKFLOW, Action.ADD)
        assert not has_permission(sales_exec, Module.ORDER_WORKFLOW, Action.DELETE)

    def test_modules_are_independent(self, sales_exec):
        permission_service.grant(sales_exec, Module.SALES, Action.VIEW)
        assert not has_permission(sales_exec, Module.SALES_RATES, Action.VIEW)

    def test_inactive_user_is_denied(self, db_session):
        user = make_user("gone", grants=[("DASHBOARD", "VIEW")])
        user.is_active = False
        db_session.commit()
        assert not has_permission(user, Module.DASHBOARD, Action.VIEW)

    def test_none_user_is_denied(self, db_session):
        assert not has_permission(None, Module.DASHBOARD, Action.VIEW)

    def test_string_inputs_are_parsed(self, sales_exec):
        permission_service.grant(sales_exec, "dashboard", "view")
        assert has_permission(sales_exec, "DASHBOARD", "VIEW")

    def test_unknown_module_is_rejected(self, sales_exec):
        with pytest.raises(ValueError):
            has_permission(sales_exec, "PAYROLL", Action.VIEW)

    def test_change_applies_immediately(self, sales_exec):
        assert not has_permission(sales_exec, Module.TASK_MANAGEMENT, Action.VIEW)
        permission_service.grant(sales_exec, Module.TASK_MANAGEMENT, Action.VIEW)
        assert has_permission(sales_exec, Module.TASK_MANAGEMENT, Action.VIEW)
        permission_service.revoke(sales_exec, Module.TASK_MANAGEMENT, Action.VIEW)
        assert not has_permission(sales_exec, Module.TASK_MANAGEMENT, Action.VIEW)


class TestRequirePermission:
    def test_raises_with_module_and_action(self, sales_exec):
        with pytest.raises(PermissionDeniedError) as exc:
            require_permission(sales_exec, Module.EWAY_BILLS, Action.DELETE)
        assert exc.value.module is Module.EWAY_BILLS
        assert exc.value.action is Action.DELETE

    def test_passes_when_granted(self, sales_exec):
        permission_service.grant(sales_exec, Module.EWAY_BILLS, Action.DELETE)
        require_permission(sales_exec, Module.EWAY_BILLS, Action.DELETE)


class TestSetGrants:
    def test_replaces_existing_rows(self, sales_exec):
        permission_service.set_grants(sales_exec, [{"module": "SALES", "action": "VIEW"}])
        permission_service.set_grants(sales_exec, [{"module": "PRICING", "action": "ADD"}])

        grants = permission_service.list_grants(sales_exec)
        assert grants == [{"module": "PRICING", "action": "ADD", "granted": True}]
        assert not has_permission(sales_exec, Module.SALES, Action.VIEW)

    def test_rejects_unknown_values_and_keeps_old_rows(self, sales_exec):
        permission_service.set_grants(sales_exec, [{"module": "SALES", "action": "VIEW"}])
        with pytest.raises(ValidationError) as exc:
            permission_service.set_grants(sales_exec, [{"module": "SALES", "action": "APPROVE"}])
        assert "permissions[0]" in exc.value.fields
        assert has_permission(sales_exec, Module.SALES, Action.VIEW)

    def test_requires_a_list(self, sales_exec):
        with pytest.raises(ValidationError):
            permission_service.set_grants(sales_exec, {"module": "SALES", "action": "VIEW"})

    def test_role_does_not_grant_anything(self, db_session):
        manager = make_user("manager", role=Role.SALES_MANAGER)
        assert permission_service.list_grants(manager) == []
        assert not has_permission(manager, Module.DASHBOARD, Action.VIEW)

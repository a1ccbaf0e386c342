import re

import pytest

from src.shopfloor.shopfloor.core.enums import QRPointType, Role
from src.shopfloor.shopfloor.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.shopfloor.shopfloor.qr.service import QRPointRegistry

from tests.fakes import FakeQRPointRepo


def test_admin_registers_point_with_random_token():
    registry = QRPointRegistry(FakeQRPointRepo())

    point = registry.register_point(current_role=Role.ADMIN, point_type=QRPointType.ENTRANCE, name="Gate A")
    other = registry.register_point(current_role=Role.ADMIN, point_type=QRPointType.LUNCH, name="Canteen")

    assert re.fullmatch(r"[0-9a-f]{64}", point.token)
    assert point.token != other.token
    assert registry.resolve(point.token).point_type == QRPointType.ENTRANCE
    assert len(registry.list_points()) == 2


def test_employee_cannot_manage_points():
    registry = QRPointRegistry(FakeQRPointRepo())

    with pytest.raises(AuthorizationError):
        registry.register_point(current_role=Role.EMPLOYEE, point_type=QRPointType.EXIT, name="Gate B")
    with pytest.raises(AuthorizationError):
        registry.remove_point(current_role=Role.EMPLOYEE, point_id=1)


def test_blank_name_and_unknown_points():
    registry = QRPointRegistry(FakeQRPointRepo())

    with pytest.raises(ValidationError):
        registry.register_point(current_role=Role.ADMIN, point_type=QRPointType.EXIT, name="  ")
    with pytest.raises(NotFoundError):
        registry.resolve("missing")
    with pytest.raises(NotFoundError):
        registry.remove_point(current_role=Role.ADMIN, point_id=5)

from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, current_role, json_body, json_endpoint, ok
from ..core.enums import QRPointType
from ..core.exceptions import ValidationError
from ..container import Container


def _point_dict(point) -> dict:
    return {
        "id": point.point_id,
        "token": point.token,
        "type": point.point_type.value,
        "name": point.name,
        "created_at": point.created_at.isoformat() if point.created_at else None,
    }


def register(app: Flask, container: Container) -> None:
    registry = container.qr_registry

    @app.route("/api/qr/points", methods=["GET"], endpoint="qr_points_list")
    @admin_required
    @json_endpoint
    def list_points():
        return ok([_point_dict(p) for p in registry.list_points()])

    @app.route("/api/qr/points", methods=["POST"], endpoint="qr_points_create")
    @admin_required
    @json_endpoint
    def create_point():
        data = json_body()
        try:
            point_type = QRPointType(str(data.get("type") or "").upper())
        except ValueError:
            raise ValidationError("type must be one of " + ", ".join(t.value for t in QRPointType))
        point = registry.register_point(current_role=current_role(), point_type=point_type, name=data.get("name") or "")
        return ok(_point_dict(point), 201)

    @app.route("/api/qr/points/<int:point_id>", methods=["DELETE"], endpoint="qr_points_delete")
    @admin_required
    @json_endpoint
    def delete_point(point_id: int):
        registry.remove_point(current_role=current_role(), point_id=point_id)
        return ok({"id": point_id})

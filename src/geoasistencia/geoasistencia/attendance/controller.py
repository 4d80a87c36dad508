from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.device import ensure_device_id
from ..container import Container
from ..core.enums import MarkOutcome, RejectReason
from ..core.exceptions import (
    AuthenticationError,
    GatewayError,
    SessionBusyError,
    SessionNotStartedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_session_service

    def employee_required(view):
        """Needs ``user_id`` and the backend ``token`` put in the session by the login page."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session or not session.get("token"):
                return jsonify({"success": False, "message": "Inicia sesión para continuar"}), 401

            user_id = int(session["user_id"])
            try:
                if not service.is_open(user_id):
                    service.open(user_id, token=str(session["token"]), device_id=ensure_device_id(session))
                return view(user_id, *args, **kwargs)
            except AuthenticationError as e:
                service.close(user_id)
                session.clear()
                return jsonify({"success": False, "message": str(e)}), 401
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except SessionBusyError:
                reason = RejectReason.SAVE_IN_FLIGHT
                return jsonify({"success": False, "reason": reason.value, "message": reason.message}), 409
            except SessionNotStartedError:
                logger.exception("Attendance session vanished for user %s", user_id)
                return jsonify({"success": False, "message": "Sesión de asistencia no iniciada"}), 409
            except GatewayError as e:
                return jsonify({"success": False, "message": str(e)}), 502

        return wrapper

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Cuerpo JSON requerido")
        return data

    @app.route("/asistencia/sedes", methods=["GET"], endpoint="asistencia_sedes")
    @employee_required
    def asistencia_sedes(user_id: int):
        sites = service.load_sites(user_id)
        return jsonify(
            {
                "success": True,
                "data": [
                    {
                        "id_sede": s.site_id,
                        "nombre": s.name,
                        "latitud": s.coord.lat,
                        "longitud": s.coord.lng,
                        "radio_metros": s.radius_meters,
                    }
                    for s in sites
                ],
            }
        )

    @app.route("/asistencia/sede", methods=["POST"], endpoint="asistencia_sede")
    @employee_required
    def asistencia_sede(user_id: int):
        data = _json_body()
        try:
            site_id = int(data.get("id_sede"))
        except (TypeError, ValueError) as exc:
            raise ValidationError("id_sede inválido") from exc
        site = service.select_site(user_id, site_id)
        return jsonify({"success": True, "sede": site.site_id})

    @app.route("/asistencia/gps/start", methods=["POST"], endpoint="asistencia_gps_start")
    @employee_required
    def asistencia_gps_start(user_id: int):
        service.start_gps(user_id)
        return jsonify({"success": True})

    @app.route("/asistencia/gps/stop", methods=["POST"], endpoint="asistencia_gps_stop")
    @employee_required
    def asistencia_gps_stop(user_id: int):
        service.stop_gps(user_id)
        return jsonify({"success": True})

    @app.route("/asistencia/gps/fix", methods=["POST"], endpoint="asistencia_gps_fix")
    @employee_required
    def asistencia_gps_fix(user_id: int):
        service.push_fix(user_id, _json_body())
        return jsonify({"success": True})

    @app.route("/asistencia/gps/error", methods=["POST"], endpoint="asistencia_gps_error")
    @employee_required
    def asistencia_gps_error(user_id: int):
        data = request.get_json(silent=True) or {}
        service.push_error(user_id, str(data.get("message") or "Error GPS"))
        return jsonify({"success": True})

    @app.route("/asistencia/marcar", methods=["POST"], endpoint="asistencia_marcar")
    @employee_required
    def asistencia_marcar(user_id: int):
        data = _json_body()
        result = service.mark(user_id, str(data.get("tipo", "")))

        if result.outcome == MarkOutcome.ACCEPTED:
            return jsonify({"success": True, "tipo": result.type.value, "message": f"{result.type.value} registrada"})
        if result.outcome == MarkOutcome.REJECTED:
            return jsonify({"success": False, "reason": result.reason.value, "message": result.message}), 409
        return jsonify({"success": False, "message": result.message}), 502

    @app.route("/asistencia/estado", methods=["GET"], endpoint="asistencia_estado")
    @employee_required
    def asistencia_estado(user_id: int):
        return jsonify({"success": True, "data": service.view(user_id)})

    @app.route("/asistencia/cerrar", methods=["POST"], endpoint="asistencia_cerrar")
    def asistencia_cerrar():
        # Leaving the page drops the in-memory session; the login stays.
        if "user_id" in session:
            service.close(int(session["user_id"]))
        return jsonify({"success": True})

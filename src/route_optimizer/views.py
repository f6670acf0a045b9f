from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from pydantic import ValidationError

from route_optimizer.exceptions import InsufficientPointsError
from route_optimizer.schemas import RouteOptimizeRequest, RouteOptimizeResponse
from route_optimizer.services.capabilities import resolve_capabilities
from route_optimizer.services.optimizer import RouteOptimizerService
from route_optimizer.services.safety import normalize_route_error_message

logger = logging.getLogger(__name__)

_optimizer_service: RouteOptimizerService | None = None


def get_route_optimizer() -> RouteOptimizerService:
    global _optimizer_service
    if _optimizer_service is None:
        _optimizer_service = RouteOptimizerService()
    return _optimizer_service


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    capabilities = resolve_capabilities()
    return JsonResponse(
        {
            "status": "ok",
            "providers": {
                "kakao": capabilities.has("kakao"),
                "odsay": capabilities.has("odsay"),
            },
        }
    )


@csrf_exempt
@require_POST
async def route_optimize_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        route_request = RouteOptimizeRequest.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": "Invalid optimize route payload",
                    "details": exc.errors(include_url=False, include_context=False),
                }
            },
            status=400,
        )

    optimizer = get_route_optimizer()
    try:
        result = await optimizer.optimize(route_request.to_route_request())
    except InsufficientPointsError as exc:
        return _error_response("insufficient_points", normalize_route_error_message(exc), 422)
    except Exception as exc:
        logger.exception("Route optimization failed")
        return _error_response("internal_error", normalize_route_error_message(exc), 500)

    response = RouteOptimizeResponse.from_result(result)
    data = response.model_dump(mode="json", by_alias=True, exclude_none=True)
    return JsonResponse({"success": True, "data": data}, status=200)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "Request body must be a JSON object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)

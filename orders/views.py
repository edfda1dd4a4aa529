import logging
from functools import wraps

from django.apps import apps
from django.http import HttpResponse, HttpResponseNotModified, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .errors import OrderError
from .validators import BadJSON, CreateOrderCommand, UpdateOrderCommand, parse_json_body

logger = logging.getLogger(__name__)


def _json(data, status=200, etag=None):
    response = JsonResponse(data, status=status, safe=False, json_dumps_params={"ensure_ascii": False})
    if etag is not None:
        response["ETag"] = str(etag)
    return response


def _error(message, status):
    return _json({"error": message}, status)


def _not_modified(etag):
    response = HttpResponseNotModified()
    response["ETag"] = str(etag)
    return response


def _service():
    return apps.get_app_config("orders").service


def _handle_errors(view):
    """Translate order errors and undecodable bodies into JSON error responses."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except BadJSON as e:
            return _error(str(e), 400)
        except OrderError as e:
            if e.status_code >= 409:
                logger.info("%s %s rejected (%d): %s", request.method, request.path, e.status_code, e.message)
            return _error(e.message, e.status_code)
    return wrapper


@csrf_exempt
@require_http_methods(["GET", "POST"])
@_handle_errors
def orders_collection(request):
    if request.method == "POST":
        return _create_order(request)
    return _list_orders(request)


def _create_order(request):
    command = CreateOrderCommand.from_payload(parse_json_body(request))
    result = _service().create_order(command)
    response = _json(result.order.to_dict(), 201, etag=result.etag)
    response["Location"] = result.location
    return response


def _list_orders(request):
    result = _service().list_orders(if_none_match=request.headers.get("If-None-Match"))
    if result.not_modified:
        return _not_modified(result.etag)
    return _json([o.to_dict() for o in result.orders], etag=result.etag)


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@_handle_errors
def order_detail(request, order_id: str):
    if request.method == "PATCH":
        return _update_order(request, order_id)
    if request.method == "DELETE":
        _service().delete_order(order_id)
        return HttpResponse(status=204)
    return _get_order(request, order_id)


def _get_order(request, order_id):
    result = _service().get_order(order_id, if_none_match=request.headers.get("If-None-Match"))
    if result.not_modified:
        return _not_modified(result.etag)
    return _json(result.order.to_dict(), etag=result.etag)


def _update_order(request, order_id):
    command = UpdateOrderCommand.from_payload(parse_json_body(request))
    result = _service().update_order(order_id, command, if_match=request.headers.get("If-Match"))
    return _json(result.order.to_dict(), etag=result.etag)


@csrf_exempt
@require_POST
@_handle_errors
def cancel_order(request, order_id: str):
    """
    Idempotent: canceling an already canceled order returns it unchanged.
    A paid order cannot be canceled (409).
    """
    result = _service().cancel_order(order_id, if_match=request.headers.get("If-Match"))
    return _json(result.order.to_dict(), etag=result.etag)


@require_GET
def health(request):
    return _json({"status": "ok", "orders": _service().store.count()})


def not_found(request, exception=None):
    return _error("Not Found", 404)


def server_error(request):
    logger.error("Unhandled error on %s %s", request.method, request.path)
    return _error("Internal Server Error", 500)

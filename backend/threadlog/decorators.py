# Overview: Request decorators for API routes: error-to-status mapping and operator identity.

from functools import wraps
from flask import current_app, jsonify, request

from .errors import (
    ConstraintViolation,
    NotFoundError,
    PartialFailureError,
    StoreConnectionError,
    StoreError,
)
from .validation import ConflictError, ValidationError


def current_actor() -> str | None:
    """Operator email forwarded by the front end (auth lives outside this service)."""
    value = request.headers.get("X-User-Email", "").strip()
    return value or None


def service_errors(failure_message: str):
    """
    Map workflow errors to JSON responses.

    - ValidationError -> 400
    - NotFoundError -> 404
    - ConflictError / ConstraintViolation -> 409
    - PartialFailureError -> 207 with succeeded/failed ids
    - StoreConnectionError -> 503 (user may retry)
    - anything else -> 500, logged with traceback

    `failure_message` names the action ("Failed to save transaction") so the
    client can show it as-is.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"error": str(e), "details": e.details}), 404
            except ConflictError as e:
                return jsonify({"error": str(e)}), 409
            except ConstraintViolation as e:
                return jsonify({"error": failure_message, "details": e.details}), 409
            except PartialFailureError as e:
                current_app.logger.warning("%s: %s", failure_message, e)
                body = e.to_dict()
                body["error"] = f"{failure_message}: {e}"
                return jsonify(body), 207
            except StoreConnectionError as e:
                current_app.logger.warning("%s: %s", failure_message, e)
                return jsonify({"error": failure_message, "retryable": True}), 503
            except StoreError as e:
                current_app.logger.exception(failure_message)
                return jsonify({"error": failure_message, "details": e.details}), 500
            except Exception:
                current_app.logger.exception(failure_message)
                return jsonify({"error": failure_message}), 500

        return decorated_function

    return decorator

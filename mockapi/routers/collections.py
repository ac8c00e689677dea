from __future__ import annotations

import json
import logging
from typing import Any, Tuple

from fastapi import APIRouter, Request

from mockapi.core.responses import output
from mockapi.domain.patterns import (
    UnsupportedPatternError,
    classify,
    is_valid_callback,
    split_path,
)
from mockapi.repositories.json_storage import PersistenceError
from mockapi.services.datastore import DataStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["collections"])

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")
ROUTED_METHODS = [*CRUD_METHODS, "PATCH", "HEAD", "OPTIONS"]

Outcome = Tuple[Any, int]


class InvalidBodyError(ValueError):
    """Raised when a POST/PUT body cannot be turned into field values."""


def _message(text: str, status_code: int) -> Outcome:
    return {"message": text}, status_code


def _get_datastore(request: Request) -> DataStore:
    store = getattr(getattr(request.app, "state", None), "datastore", None)
    if not store:
        raise RuntimeError("DataStore is not configured")
    return store


async def _read_values(request: Request) -> dict:
    content_type = (request.headers.get("content-type") or "").lower()
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidBodyError(str(exc)) from exc
        if not isinstance(data, dict):
            raise InvalidBodyError("JSON body must be an object")
        return data
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _handle_get(store: DataStore, pattern: str, segments: list[str]) -> Outcome:
    if pattern == "C":
        result = store.list_resources(segments[0])
        missing = "Invalid collection"
    elif pattern == "CI":
        result = store.get_resource(segments[0], segments[1])
        missing = "Invalid resource"
    elif pattern == "CIC":
        result = store.get_resource(segments[0], segments[1], related=[segments[2]])
        missing = "Invalid resource"
    elif pattern == "CC":
        result = store.list_resources(segments[0], related=[segments[1]])
        missing = "Invalid collection"
    else:
        raise UnsupportedPatternError("GET", pattern)
    if result is None:
        return _message(missing, 404)
    return result, 200


def _handle_post(store: DataStore, pattern: str, segments: list[str], values: dict) -> Outcome:
    # CIC creates in the first collection; the trailing segment is ignored
    if pattern not in ("C", "CIC"):
        raise UnsupportedPatternError("POST", pattern)
    resource_id = store.save_resource(segments[0], values)
    if not resource_id:
        return _message("Save operation failed", 417)
    return {"id": resource_id}, 201


def _handle_put(store: DataStore, pattern: str, segments: list[str], values: dict) -> Outcome:
    if pattern != "CI":
        raise UnsupportedPatternError("PUT", pattern)
    if not store.save_resource(segments[0], values, segments[1]):
        return _message("Save operation failed", 417)
    return _message("Ok", 200)


def _handle_delete(store: DataStore, pattern: str, segments: list[str]) -> Outcome:
    if pattern != "CI":
        raise UnsupportedPatternError("DELETE", pattern)
    if not store.delete_resource(segments[0], segments[1]):
        return _message("Resource not found", 404)
    return None, 204


async def _dispatch(request: Request, method: str, path: str) -> Outcome:
    store = _get_datastore(request)
    url_param = request.query_params.get("url")
    segments = split_path(url_param if url_param else path)
    pattern = classify(segments, store.collection_exists)
    try:
        if method == "GET":
            return _handle_get(store, pattern, segments)
        if method == "DELETE":
            return _handle_delete(store, pattern, segments)
        values = await _read_values(request)
        if method == "POST":
            return _handle_post(store, pattern, segments, values)
        return _handle_put(store, pattern, segments, values)
    except UnsupportedPatternError as exc:
        logger.info("Unsupported request: %s", exc)
        return _message("URI pattern not supported" if method == "GET" else "URI not supported", 400)
    except InvalidBodyError as exc:
        logger.info("Invalid body for %s /%s: %s", method, path, exc)
        return _message("Invalid request body", 400)
    except PersistenceError:
        return _message("Save operation failed", 417)


@router.api_route("/{path:path}", methods=ROUTED_METHODS)
async def collection_request(path: str, request: Request):
    """
    Single entry point for every collection URL.

    The path (or the ``url`` query parameter when rewrites are unavailable) is
    classified segment by segment into a C/I pattern that selects the store
    operation. ``range`` and ``offset`` are accepted and ignored.
    """
    callback = request.query_params.get("callback") or ""
    if callback and not is_valid_callback(callback):
        return output({"message": "Invalid callback"}, 400)

    method = request.method.upper()
    if method not in CRUD_METHODS:
        logger.info("Rejected method %s for /%s", method, path)
        payload, status_code = _message("Method not supported", 405)
    else:
        payload, status_code = await _dispatch(request, method, path)
    return output(payload, status_code, callback)

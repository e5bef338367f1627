# ytprompt/routes.py
import asyncio
import datetime
import logging
from flask import Blueprint, request, jsonify
from .scraper import fetch_prompt_for_url
from .ui import PROMPT_MODES
from .utils import extract_youtube_video_id
from celery_worker import acquire_prompt_task, celery_app, cancel_task

api_bp = Blueprint("api", __name__)


def _read_request():
    """Returns (url, mode, error_response)."""
    if request.is_json:
        payload = request.get_json(silent=True) or {}
    else:
        payload = request.form
    if not isinstance(payload, dict):
        return None, None, (jsonify({"error": "Request body must be an object"}), 400)

    url = payload.get("url") or ""
    mode = payload.get("mode") or "prompt"
    if not isinstance(url, str) or not isinstance(mode, str):
        return None, None, (jsonify({"error": "url and mode must be strings"}), 400)
    url = url.strip()
    mode = mode.strip()

    if not url:
        return None, None, (jsonify({"error": "URL is required"}), 400)
    if not url.startswith("http"):
        url = "https://" + url.lstrip("/")
    if not extract_youtube_video_id(url):
        return None, None, (jsonify({"error": "Not a YouTube video URL", "url": url}), 400)
    if mode not in PROMPT_MODES:
        return None, None, (jsonify({"error": f"mode must be one of {list(PROMPT_MODES)}"}), 400)
    return url, mode, None


@api_bp.route("/transcript", methods=["POST"])
def transcript():
    url, mode, error = _read_request()
    if error:
        return error

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        result = loop.run_until_complete(fetch_prompt_for_url(url, mode=mode))

        if result.get("error"):
            return jsonify({
                "status": "NOT_FOUND",
                "error": result["error"],
                "url": url,
            }), 404

        result["created_at"] = datetime.datetime.utcnow()
        return jsonify(result), 200

    except Exception as e:
        logging.error(f"Error processing transcript for {url}: {e}", exc_info=True)
        return jsonify({
            "status": "FAILED",
            "error": str(e),
            "url": url
        }), 500

    finally:
        loop.close()


@api_bp.route("/transcript/async", methods=["POST"])
def transcript_async():
    url, mode, error = _read_request()
    if error:
        return error

    task = acquire_prompt_task.delay(url, mode)
    logging.info(f"Queued transcript task {task.id} for {url}")
    return jsonify({
        "task_id": task.id,
        "status": "IN_PROGRESS",
        "url": url,
    }), 202


@api_bp.route("/status/<task_id>", methods=["GET"])
def get_task_status(task_id):
    """
    Fetch task state and, once finished, its result from the Celery backend.
    """
    result = celery_app.AsyncResult(task_id)
    body = {"task_id": task_id, "status": result.state}

    if result.state == "PROGRESS":
        body["meta"] = result.info
    elif result.successful():
        body.update(result.result or {})
    elif result.failed():
        body["error"] = str(result.result)

    return jsonify(body)


@api_bp.route("/cancel/<task_id>", methods=["POST"])
def cancel(task_id):
    cancel_task(task_id)
    return jsonify({"task_id": task_id, "status": "REVOKED"})


@api_bp.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "healthy"}), 200

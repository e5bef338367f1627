from unittest.mock import MagicMock, patch

import pytest

import celery_worker
from celery_worker import acquire_prompt_task

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def fake_run_async(result=None, error=None):
    def run(coro):
        coro.close()
        if error:
            raise error
        return result
    return run


@patch.object(acquire_prompt_task, "update_state")
def test_task_returns_prompt(mock_update):
    result = {"status": "COMPLETED", "prompt": "Title: x\nhello"}
    with patch.object(celery_worker, "run_async", fake_run_async(result)):
        assert acquire_prompt_task.run(URL) == result

    mock_update.assert_called_once()
    assert mock_update.call_args.kwargs["state"] == "PROGRESS"


@patch.object(acquire_prompt_task, "update_state")
def test_task_reports_missing_transcript(mock_update):
    with patch.object(celery_worker, "run_async", fake_run_async({"error": "No transcript found for this video"})):
        result = acquire_prompt_task.run(URL, "transcript")

    assert result == {"status": "NOT_FOUND", "url": URL, "error": "No transcript found for this video"}


@patch.object(acquire_prompt_task, "update_state")
def test_task_wraps_pipeline_failure(mock_update):
    with patch.object(celery_worker, "run_async", fake_run_async(error=TimeoutError("page load"))):
        with pytest.raises(RuntimeError, match="page load"):
            acquire_prompt_task.run(URL)


@patch.object(celery_worker.celery_app, "control", new_callable=MagicMock)
def test_cancel_revokes_task(mock_control):
    celery_worker.cancel_task("task-1")

    mock_control.revoke.assert_called_once_with("task-1", terminate=True, signal="SIGKILL")

import multiprocessing
multiprocessing.set_start_method("spawn", force=True)
import logging
import asyncio
from dotenv import load_dotenv

load_dotenv()

from ytprompt.config import REDIS_URL
from ytprompt.scraper import fetch_prompt_for_url
from celery import Celery

# Broker/backend
celery_app = Celery("tasks", broker=REDIS_URL, backend=REDIS_URL)

# Ensure STARTED is reported
celery_app.conf.task_track_started = True
celery_app.conf.worker_prefetch_multiplier = 1  # one browser per worker at a time


# ---------------- Utility helpers ----------------

def run_async(coro):
    import nest_asyncio
    nest_asyncio.apply()

    try:
        loop = asyncio.get_event_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    task = loop.create_task(coro)

    if loop.is_running():
        while not task.done():
            loop.stop()
            loop.run_forever()
        return task.result()
    else:
        return loop.run_until_complete(task)


# ---------------- Celery Task ----------------

@celery_app.task(bind=True, track_started=True)
def acquire_prompt_task(self, url: str, mode: str = "prompt") -> dict:
    """
    Runs the headless transcript pipeline for `url` and returns the prompt.
    "No transcript" is a normal outcome, reported in the result.
    """
    try:
        logging.info(f"[Prompt Task] Started for url={url}")
        self.update_state(state="PROGRESS", meta={"msg": "Fetching transcript..."})

        result = run_async(fetch_prompt_for_url(url, mode=mode))

        if result.get("error"):
            logging.info(f"[Prompt Task] No transcript for url={url}: {result['error']}")
            return {"status": "NOT_FOUND", "url": url, "error": result["error"]}

        logging.info(f"[Prompt Task] Completed for url={url}")
        return result

    except Exception as e:
        logging.error(f"[Prompt Task] Failed for url={url}: {e}")
        raise RuntimeError(f"Prompt task failed for {url}: {e}")


# ---------------- Cancel Helper ----------------

def cancel_task(task_id, terminate=True):
    """
    Cancel a Celery task by ID.
    """
    celery_app.control.revoke(task_id, terminate=terminate, signal="SIGKILL")

import asyncio
import logging
import threading
import time

from flask import Flask, jsonify

from sleepwatch.bot import run_bot
from sleepwatch.config import TOKEN, WEB_PORT
from sleepwatch.database import SessionLocal
from sleepwatch.services.tracker import collect_stats

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Bot state shared with the polling thread
bot_thread = None
bot_running = False
tracker = None
session_factory = SessionLocal


def _token_preview():
    return f"{TOKEN[:10]}..." if TOKEN else "not_set"


def _on_ready(ready_tracker):
    global tracker, bot_running
    tracker = ready_tracker
    bot_running = True


def run_bot_thread():
    """Run the bot with its own event loop in a worker thread."""
    global bot_running, tracker

    if not TOKEN:
        logger.error("BOT_TOKEN is not set")
        return

    logger.info("Starting bot with token %s", _token_preview())
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        loop.run_until_complete(run_bot(TOKEN, on_ready=_on_ready))
    except Exception as e:
        logger.error("Bot stopped with error: %s", e)
    finally:
        bot_running = False
        tracker = None
        loop.close()


def _start_thread():
    global bot_thread
    bot_thread = threading.Thread(target=run_bot_thread, daemon=False)
    bot_thread.start()


@app.route("/health")
def health():
    """Bot health check."""
    if bot_running and tracker is not None:
        return jsonify({
            "status": "running",
            "bot": "active",
            "active_sessions": len(tracker.scheduler.active()),
            "token": _token_preview(),
        })
    return jsonify({
        "status": "error",
        "message": "Bot not initialized",
        "token": _token_preview(),
        "bot_running": bot_running,
    })


@app.route("/stats")
def stats():
    """Row counts plus the number of running sleep sessions."""
    if tracker is not None:
        return jsonify(tracker.stats())
    data = collect_stats(session_factory)
    data["active_sessions"] = 0
    return jsonify(data)


@app.route("/start_bot", methods=["POST"])
def start_bot():
    """Start the bot unless it is already running."""
    if bot_thread and bot_thread.is_alive() and bot_running:
        return jsonify({"status": "already_running"})
    if not TOKEN:
        return jsonify({"status": "error", "message": "BOT_TOKEN is not set"}), 400

    _start_thread()
    # give polling a moment to come up
    time.sleep(2)
    return jsonify({
        "status": "started",
        "token": _token_preview(),
        "bot_running": bot_running,
    })


@app.route("/debug")
def debug():
    return jsonify({
        "token_set": bool(TOKEN),
        "token_preview": _token_preview(),
        "tracker_exists": tracker is not None,
        "bot_running": bot_running,
        "thread_alive": bot_thread.is_alive() if bot_thread else False,
    })


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # Start the bot together with the web server (for Render)
    if TOKEN:
        logger.info("Starting bot automatically")
        _start_thread()
        time.sleep(3)
    else:
        logger.warning("BOT_TOKEN is not set, the bot will not start")

    app.run(host="0.0.0.0", port=WEB_PORT, debug=False)

import time
from typing import Optional

from quizboard import socketio
from quizboard.broadcaster import dispatch
from . import get_engine

_started_apps = set()


def run_sweep(app, now: Optional[float] = None) -> int:
    """Run one timeout sweep over every session and emit the results.

    Returns the number of outbound messages dispatched.
    """
    with app.app_context():
        outbound = get_engine(app).timeout_sweep(now)
        if outbound:
            app.logger.info(f"[timer-fire] sessions_updated={len(outbound)}")
            dispatch(outbound)
        return len(outbound)


def start_sweeper(app) -> bool:
    """Start the background sweep loop for this app.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Starts at most one loop per application
    - Ticks every SWEEP_INTERVAL_SEC seconds of wall-clock time
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False
    if id(app) in _started_apps:
        app.logger.info("[timer-skip] sweeper already running")
        return False
    _started_apps.add(id(app))

    interval = float(app.config.get('SWEEP_INTERVAL_SEC', 1.0))
    heartbeat = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
    app.logger.info(f"[timer-set] sweeper interval={interval}s")

    def _worker():
        last_beat = time.time()
        while True:
            socketio.sleep(interval)
            try:
                run_sweep(app)
            except Exception:
                # a bad tick must not kill the loop; the next tick retries
                app.logger.exception("[timer-error] sweep failed")
            if heartbeat > 0 and time.time() - last_beat >= heartbeat:
                last_beat = time.time()
                with app.app_context():
                    sessions = len(get_engine(app).store.sessions())
                app.logger.info(f"[timer-heartbeat] sessions={sessions}")

    socketio.start_background_task(_worker)
    return True

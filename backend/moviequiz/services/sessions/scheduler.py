from moviequiz import registry, socketio
from moviequiz.models import Room


def schedule_teardown(app, room: Room) -> None:
    """Destroy ``room`` once the grace delay has passed.

    The delay lets the final score broadcast reach every client before
    the room disappears. A zero delay tears down immediately. No
    cancellation: the runner only removes the exact room it was given.
    """
    delay = float(app.config.get('SESSION_TEARDOWN_DELAY_SEC', 5))
    code = room.code

    def _runner():
        if delay > 0:
            socketio.sleep(delay)
        with app.app_context(), room.lock:
            app.logger.info(f"[teardown-fire] room={code}")
            registry.destroy_session(code, room)

    if delay <= 0:
        _runner()
        return
    app.logger.info(f"[teardown-set] room={code} delay={delay}s")
    socketio.start_background_task(_runner)

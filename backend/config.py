import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of browser origins allowed to talk to the server
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Stones placed in each pit at the start of a game
    STONES_PER_PIT = int(os.environ.get('STONES_PER_PIT', '4'))
    # Eviction timers (seconds)
    FINISHED_GRACE_SEC = int(os.environ.get('FINISHED_GRACE_SEC', '300'))
    CANCELLED_GRACE_SEC = int(os.environ.get('CANCELLED_GRACE_SEC', '5'))
    # Hosted games nobody joined are dropped after this long
    STALE_WAITING_SEC = int(os.environ.get('STALE_WAITING_SEC', '600'))

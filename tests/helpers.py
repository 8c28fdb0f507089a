from datetime import datetime, timezone

from redis.exceptions import RedisError

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

ADDRESS = {
    "full_name": "Alice Smith",
    "address": "12 Long Street",
    "city": "Springfield",
    "postal_code": "12345",
    "phone": "5550001234",
}


def auth(user_id=1):
    return {"X-User-Id": str(user_id)}


class FakeLockService:
    """In-process stand-in for the Redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.down = False
        self.released = []

    def acquire_checkout_lock(self, user_id):
        if self.down:
            raise RedisError("connection refused")
        if user_id in self.held:
            return None
        token = f"token-{user_id}"
        self.held[user_id] = token
        return token

    def release_checkout_lock(self, user_id, token):
        self.released.append(user_id)
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, user_id, order_id):
        self.sent.append((user_id, order_id))

import redis
import logging
import time

# ---------------------------------------------------------
# LOGGING
# ---------------------------------------------------------
logger = logging.getLogger("api.redis")

# ---------------------------------------------------------
# REDIS INIT (LAZY, ONE CLIENT PER URL)
# ---------------------------------------------------------
_clients: dict = {}


def get_redis_client(redis_url: str):
    client = _clients.get(redis_url)
    if client is not None:
        return client

    logger.info("[REDIS] Initializing Redis client REDIS_URL=%s", redis_url)
    client = redis.from_url(
        redis_url,
        decode_responses=True,
    )
    _clients[redis_url] = client
    return client


# ---------------------------------------------------------
# CONNECTION DIAGNOSTICS
# ---------------------------------------------------------
def ping_with_latency(client) -> tuple[bool, int]:
    t0 = time.time()
    try:
        pong = bool(client.ping())
    except redis.RedisError as e:
        logger.error("[REDIS] ping failed: %s", e)
        return False, int((time.time() - t0) * 1000)
    ms = int((time.time() - t0) * 1000)
    logger.info("[REDIS] ping=%s latency=%sms", pong, ms)
    return pong, ms

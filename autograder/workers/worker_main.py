# autograder/workers/worker_main.py

import logging

from rq import Queue, SimpleWorker

from autograder.core.config import settings
from autograder.db.session import init_db
from autograder.workers.queue import get_redis_connection


QUEUE_NAMES = [settings.SCORING_QUEUE_NAME]


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    redis_conn = get_redis_connection()

    queues = [Queue(name, connection=redis_conn) for name in QUEUE_NAMES]

    worker = SimpleWorker(queues, connection=redis_conn)

    worker.work()


if __name__ == "__main__":
    main()

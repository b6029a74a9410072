"""Consumer process — wires Redis queue → EventConsumer → MongoDB and runs until signalled."""

import signal

from config import Settings, configure_logging
from processor.consumer import ConsumerState, EventConsumer
from processor.dead_letter import DeadLetterQueue
from storage.cache import ConsumerStatusCache
from storage.event_queue import EventQueue
from storage.event_store import EventStore
from storage.redis_client import RedisClient


class ConsumerProcess:
    """
    Owns the process-scoped connections. Both are acquired once in ``run``
    and released on every exit path, including signals.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.log = configure_logging("consumer-process", settings.log_level)
        self._consumer: EventConsumer | None = None

    def _shutdown(self, signum, frame):
        self.log.info("shutdown_signal", signal=signum)
        consumer = self._consumer
        if consumer is None:
            raise KeyboardInterrupt
        consumer.stop()
        # A blocking take never returns on its own; an item being processed
        # is allowed to finish.
        if consumer.state is ConsumerState.WAITING:
            raise KeyboardInterrupt

    def run(self):
        signal.signal(signal.SIGTERM, self._shutdown)
        signal.signal(signal.SIGINT, self._shutdown)

        with RedisClient(self.settings) as redis_client, EventStore(self.settings) as store:
            store.ensure_indexes()
            self._consumer = EventConsumer(
                self.settings,
                queue=EventQueue(redis_client, self.settings),
                store=store,
                dead_letters=DeadLetterQueue(redis_client, self.settings),
                status=ConsumerStatusCache(redis_client, self.settings.consumer_state_key),
            )
            try:
                self._consumer.run()
            finally:
                self._consumer = None
        self.log.info("consumer_process_exited")


def main():
    ConsumerProcess(Settings()).run()


if __name__ == "__main__":
    main()

import json
import logging
import socket
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from confluent_kafka import KafkaException, Producer
from confluent_kafka.error import KafkaError

from config.kafka import TOPIC_FUNNEL_EVENTS

logger = logging.getLogger(__name__)

def _get_kafka_config(bootstrap_servers: str, client_id: Optional[str] = None) -> dict:
    """Builds the Kafka configuration dictionary."""
    config = {
        'bootstrap.servers': bootstrap_servers,
        'client.id': client_id or socket.gethostname(),
        'retries': 5,
        'message.timeout.ms': 10000, # 10 seconds per message attempt
        'linger.ms': 10, # Small batching delay, analytics events are not latency sensitive
    }
    logger.info(f"Kafka Producer config: {config}")
    return config

def _delivery_report(err: Optional[KafkaError], msg):
    """Callback function for Kafka message delivery reports."""
    if err is not None:
        logger.error(f"Analytics event delivery failed: {err}")
    else:
        logger.debug(
            f"Analytics event delivered to {msg.topic()} [{msg.partition()}] @ offset {msg.offset()}"
        )


class KafkaAnalyticsSink:
    """
    Analytics sink publishing tracker events to a Kafka topic.

    Each record is JSON: {"event_name", "payload", "sent_at"}, keyed by the
    session id when the payload carries one. Delivery is best effort:
    failures are logged and reported through the return value, never raised.
    """

    def __init__(
        self,
        producer: Optional[Producer] = None,
        topic: str = TOPIC_FUNNEL_EVENTS,
        bootstrap_servers: str = "localhost:9092",
        client_id: Optional[str] = None,
    ):
        self.topic = topic
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self._producer = producer

    @property
    def producer(self) -> Optional[Producer]:
        """Lazily created producer; None if it could not be initialized."""
        if self._producer is None:
            try:
                self._producer = Producer(_get_kafka_config(self.bootstrap_servers, self.client_id))
                logger.info("Confluent Kafka Producer initialized.")
            except KafkaException as e:
                logger.error(f"Failed to initialize Confluent Kafka Producer: {e}")
                self._producer = None
        return self._producer

    def _send(self, record: Dict[str, Any], key: Optional[str] = None) -> bool:
        producer = self.producer
        if producer is None:
            logger.error("Kafka producer is not initialized. Analytics event dropped.")
            return False

        try:
            serialized_value = json.dumps(record, ensure_ascii=False, default=str).encode('utf-8')
            serialized_key = key.encode('utf-8') if key else None
            producer.produce(
                self.topic,
                value=serialized_value,
                key=serialized_key,
                callback=_delivery_report
            )
            # Serve already-queued delivery callbacks without blocking
            producer.poll(0)
            return True
        except BufferError:
            logger.error(f"Kafka producer queue is full for topic '{self.topic}'. Flushing, event dropped.")
            producer.flush(5)
            return False
        except (KafkaException, TypeError, ValueError) as e:
            logger.error(f"Error producing analytics event to topic '{self.topic}': {e}")
            return False

    def track_custom_event(self, name: str, payload: Dict[str, Any]) -> bool:
        record = {
            "event_name": name,
            "payload": payload,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        return self._send(record, key=payload.get("session_id"))

    def track_event(self, name: str, payload: Dict[str, Any]) -> bool:
        return self.track_custom_event(name, payload)

    def track_timing(self, category: str, label: str, ms: int) -> bool:
        record = {
            "event_name": "timing",
            "payload": {"category": category, "label": label, "value_ms": ms},
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        return self._send(record)

    def flush(self, timeout: float = 10.0) -> int:
        """Flushes the producer queue; returns the number of messages still queued."""
        if self._producer is None:
            return 0
        remaining = self._producer.flush(timeout)
        if remaining > 0:
            logger.warning(f"Producer flush timed out, {remaining} messages still in queue.")
        else:
            logger.info("Producer flushed successfully.")
        return remaining

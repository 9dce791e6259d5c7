from .kafka import AIOKafkaConsumerMock, consumer_record
from .records import mk_record, order_schema, order_value

__all__ = [
    "AIOKafkaConsumerMock",
    "consumer_record",
    "mk_record",
    "order_schema",
    "order_value",
]

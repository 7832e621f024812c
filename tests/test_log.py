import logging

from shared.log import GenericFormatter, get_logger, log_inbound_message
from shared.message import InboundMessage


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def make_logger(name):
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    handler = ListHandler()
    logger.addHandler(handler)
    return logger, handler


def test_inbound_message_logged_with_record_fields():
    logger, handler = make_logger("wscount.test.inbound")

    log_inbound_message(InboundMessage.from_frame("hello"), logger)
    log_inbound_message(InboundMessage.from_frame(bytes(10)), logger)

    first, second = handler.records
    assert first.levelno == logging.INFO
    assert (first.msg_type, first.msg_len) == ("text", 5)
    assert "'messageData': 'hello'" in first.getMessage()
    assert (second.msg_type, second.msg_len) == ("binary", 10)


def test_generic_formatter_prefixes_context():
    formatter = GenericFormatter(fmt="%(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "Received", None, None)
    record.msg_type = "text"
    record.msg_len = 5

    assert formatter.format(record) == "[type=text len=5] Received"


def test_get_logger_configures_once():
    logger = get_logger("wscount.test.once")
    handlers = list(logger.handlers)

    assert get_logger("wscount.test.once") is logger
    assert logger.handlers == handlers
    assert logger.propagate is False

import socket
import logging

logger = logging.getLogger("vtwriter")

PORT = 12013


class UDPHandler(logging.Handler):
    """Send log records over UDP, to be picked up by listen_to_logs()."""

    udp_address = ("127.0.0.1", PORT)

    def __init__(self):
        super().__init__()
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def emit(self, record):
        try:
            msg = self.format(record)
            bb = msg.encode()
            size = 2**10
            while bb:
                bb1 = bb[:size]
                bb = bb[size:]
                self._socket.sendto(bb1, self.udp_address)
        except Exception:
            self.handleError(record)

    def close(self):
        self._socket.close()
        super().close()


def enable_log_forwarding(level=logging.INFO):
    """Forward the vtwriter logs over UDP.

    Logs written to the terminal would get mixed up with the replies we
    read from it in raw mode, so we send them elsewhere instead.
    """
    for handler in logger.handlers:
        if isinstance(handler, UDPHandler):
            break
    else:
        handler = UDPHandler()
        logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def listen_to_logs():
    """Called from ``vtwriter --listen``

    This way we can see the logs from another process, so it does not get mixed up with the terminal i/o.
    """

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", PORT))

    while True:
        data, addr = sock.recvfrom(2**20)
        print(data.decode())

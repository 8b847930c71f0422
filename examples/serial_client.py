#!/usr/bin/env python3
"""Print passings from a TranX-2 decoder on a serial port.

    python examples/serial_client.py /dev/ttyUSB0
"""

import logging
import sys

from tranx2.client import Client


class PrintHandler:
    def on_passing(self, rec):
        print(f"transponder={rec.transponder_id} ticks={rec.passing_ticks} "
              f"hits={rec.hits} strength={rec.strength}")

    def on_noise(self, noise):
        print(f"noise={noise}")

    def on_error(self, err):
        logging.warning("%s", err)


logging.basicConfig(level=logging.INFO)
port = sys.argv[1] if len(sys.argv) > 1 else "/dev/ttyUSB0"

client = Client(port, PrintHandler())
client.listen()
try:
    client.serve()
except EOFError:
    pass
except KeyboardInterrupt:
    pass
finally:
    client.close()

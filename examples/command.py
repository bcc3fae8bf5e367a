"""Sends a command to an RCON server."""
import logging

import mcrconpy as rcon

ADDRESS = "localhost:25575"
PASSWORD = "SuperSecurePassword"

log = logging.getLogger("mcrconpy")
log.setLevel(logging.DEBUG)
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(name)s: %(message)s"))
log.addHandler(handler)


def main():
    with rcon.RCONClient.connect(ADDRESS) as client:
        client.log_in(PASSWORD)
        response = client.send_command("seed")
        print(response)


if __name__ == "__main__":
    main()

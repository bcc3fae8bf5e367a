"""Provides an interactive prompt for sending commands."""

import logging

import mcrconpy as rcon

ADDRESS = "localhost:25575"
PASSWORD = "SuperSecurePassword"

log = logging.getLogger("mcrconpy")
log.setLevel(logging.WARNING)
handler = logging.StreamHandler()
handler.setFormatter(
    logging.Formatter("%(asctime)s:%(levelname)s:%(name)s: %(message)s")
)
log.addHandler(handler)

config = rcon.ClientConfig(read_timeout=10.0)


def main():
    with rcon.RCONClient.connect(ADDRESS, config=config) as client:
        client.log_in(PASSWORD)
        print(client.send_command("help"))

        while True:
            try:
                command = input("> ")
            except EOFError:
                break

            if command.lower() in ("exit", "quit"):
                break

            try:
                response = client.send_command(command)
            except (rcon.InvalidPayload, rcon.InvalidStateError) as e:
                print(e)
            else:
                print(response)


if __name__ == "__main__":
    main()

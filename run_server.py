"""Run the sensor fleet together with the JSON API."""

import sys

from sensor_client.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["serve", *sys.argv[1:]]))

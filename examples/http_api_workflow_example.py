"""
Example script driving a running NeonBit simulator through its HTTP API.

Start the simulator first:

    neonbit-simulator --api

This script showcases:
- Checking health and reading the full state.
- Switching modes and loading a bit pattern.
- Walking the digit counter and reading the history strip.
- Basic error handling for out-of-range requests.
"""
import json

import requests  # For requests.exceptions.ConnectionError

from neonbit.interface.sdk_client import NeonBitClient, SimulatorAPIError

SIMULATOR_BASE_URL = "http://localhost:8765"


def pretty_print_dict(data: dict, indent: int = 2):
    print(json.dumps(data, indent=indent, default=str))


def main():
    print("--- NeonBit Simulator: HTTP API Workflow Example ---")
    print(f"Attempting to connect to simulator at: {SIMULATOR_BASE_URL}")

    with NeonBitClient(SIMULATOR_BASE_URL) as client:
        try:
            print("\n[Phase 1: Health and state]")
            print(f"Simulator health: {client.get_health().get('status', 'Unknown')}")
            pretty_print_dict(client.get_state())

            print("\n[Phase 2: Manual edit]")
            client.select_mode("manual")
            result = client.set_pattern("10xx1")
            print(f"Pattern {result['state']['pattern']} = {result['state']['value']}")
            result = client.toggle_bit(6)
            print(f"After toggling 'g': {result['state']['pattern']}")

            print("\n[Phase 3: Digit counter]")
            client.select_mode("counter")
            for _ in range(3):
                state = client.navigate(-1)["state"]
                print(f"Digit {state['value']}: {state['pattern']}")
            print(f"History (newest first): {client.get_history(limit=5)}")

            print("\n[Phase 4: Error handling]")
            try:
                client.select_digit(12)
            except SimulatorAPIError as e:
                print(f"Rejected as expected: {e.response_data}")

            print("\n[Phase 5: Snapshot]")
            pretty_print_dict(client.get_snapshot())

        except SimulatorAPIError as e:
            print(f"\nAPI error: {e}")
            if e.response_data:
                pretty_print_dict(e.response_data)
        except requests.exceptions.ConnectionError:
            print(f"\nCould not connect to {SIMULATOR_BASE_URL}. Is the simulator running with --api?")


if __name__ == "__main__":
    main()

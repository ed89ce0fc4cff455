"""
In-process demo of the NeonBit controller.

Runs the animation sequence for a second with tone cues printed instead of
played, then walks the digit counter and exports a snapshot.
"""
import asyncio
import logging

from neonbit import Mode, SegmentController
from neonbit.exporter import export_state
from neonbit.interface.tone_notifier import ToneNotifier

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def print_cue(cue):
    print(f"  beep {cue.frequency_hz:.0f}Hz for {cue.duration_s * 1000:.0f}ms ({cue.kind})")


async def main():
    controller = SegmentController(interval_ms=100)
    controller.add_listener(ToneNotifier(sink=print_cue))

    print("Animation sequence:")
    controller.set_running(True)
    await asyncio.sleep(1.0)
    controller.set_running(False)
    print(f"Stopped at {controller.value} ({controller.pattern})")

    print("Digit counter:")
    controller.select_mode(Mode.COUNTER)
    for digit in (3, 7):
        controller.select_digit(digit)
    controller.navigate(-1)
    print(f"Showing digit {controller.value} ({controller.pattern})")

    path = export_state(controller, ".")
    print(f"Snapshot written to {path}")
    await controller.shutdown()


if __name__ == "__main__":
    asyncio.run(main())

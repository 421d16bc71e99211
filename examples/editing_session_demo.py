"""
Editing session demonstration.

Loads an image, runs a chain of edits (filters, rotation, crop, the
simulated enhancements), then writes edited_image.png and prints the
operation log the history recorder receives.

Usage:
    python examples/editing_session_demo.py path/to/image.png [--premium]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
import time

from OR_Libs.errors import PermissionDeniedError
from OR_Libs.ImageEditingLib.image_models import Adjustments, TextSettings
from OR_Libs.SessionLib import EditorConfig, EditorSession, PointerEvent


def print_history(image_name, operations):
    print(f"\nHistory for {image_name}:")
    for number, label in enumerate(operations, start=1):
        print(f"  {number}. {label}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    if len(args) != 1:
        print(__doc__)
        sys.exit(1)

    source = Path(args[0])
    config = EditorConfig(premium="--premium" in sys.argv, time_unit_seconds=0.5)

    with EditorSession(config, history_recorder=print_history, notifier=print) as session:
        session.load_image(source)
        print(f"Loaded {session.display_name}: {session.size[0]}x{session.size[1]}")

        session.apply_filter("warm")
        session.apply_adjustments(Adjustments(brightness=10, contrast=15, saturation=20))
        session.rotate(90)

        width, height = session.size
        session.start_crop()
        session.crop_pointer(PointerEvent.down(width * 0.1, height * 0.1))
        session.crop_pointer(PointerEvent.move(width * 0.9, height * 0.9))
        session.crop_pointer(PointerEvent.up(width * 0.9, height * 0.9))
        session.apply_crop()

        start = time.time()
        session.auto_enhance().result()
        print(f"Auto-enhance took {time.time() - start:.2f}s")

        try:
            session.upscale().result()
            session.add_text(TextSettings("Open Retouch", font_size=32))
        except PermissionDeniedError as e:
            print(f"Skipped: {e}")

        path = session.download(source.parent)
        print(f"Saved {session.size[0]}x{session.size[1]} image to {path}")


if __name__ == "__main__":
    main()

"""
Batch compression demonstration.

Compresses every JPEG in a folder at a few quality levels, prints the size
savings and writes compressed_images.zip next to the inputs.

Usage:
    python examples/batch_compression_demo.py path/to/photos
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging

from OR_Libs.BatchLib import BatchCompressor, UploadedFile, format_size_kb
from OR_Libs.constants import BATCH_QUALITY_OPTIONS
from OR_Libs.errors import CapacityExceededError


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)

    folder = Path(sys.argv[1])
    uploads = [UploadedFile.from_path(path) for path in sorted(folder.iterdir()) if path.is_file()]
    print(f"Found {len(uploads)} file(s) in {folder}")

    batch = BatchCompressor(notifier=print)
    try:
        batch.add_files(uploads)
    except CapacityExceededError as e:
        print(f"Nothing added: {e}")
        sys.exit(2)

    print(f"\n{'File':<30} {'Original':>10} " + " ".join(f"q={q:<6g}" for q in BATCH_QUALITY_OPTIONS))
    print("-" * 90)
    for index, entry in enumerate(batch.entries):
        sizes = [format_size_kb(batch.update_quality(index, q).compressed_size) for q in BATCH_QUALITY_OPTIONS]
        print(f"{entry.display_name:<30} {format_size_kb(entry.original_size):>10} " + " ".join(f"{s:<8}" for s in sizes))

    # Settle on the default quality before exporting
    for index in range(len(batch)):
        batch.update_quality(index, batch.config.default_quality)

    for entry in batch.entries:
        print(f"{entry.display_name:<30} {entry.savings_percent:5.1f}% saved at q={entry.quality:g}")

    saved = batch.total_original_size - batch.total_compressed_size
    print(f"\nTotal: {format_size_kb(batch.total_original_size)} -> "
          f"{format_size_kb(batch.total_compressed_size)} ({format_size_kb(saved)} saved)")

    archive = batch.write_zip(folder)
    print(f"Archive written to {archive}")


if __name__ == "__main__":
    main()

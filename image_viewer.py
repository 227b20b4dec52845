"""
Command line front end for the Image Viewer data layer.

Examples:
  python image_viewer.py info photo.png
  python image_viewer.py convert photo.png photo.binary.pgm
  python image_viewer.py convert scan.pgm scan16.binary.pgm --bit-depth 16
"""

import argparse
import logging
import sys
from typing import List, Optional

from IV_Libs.ImageDataLib.errors import DecodeError
from IV_Libs.LoaderLib.loader import load
from IV_Libs.LoaderLib.serializer import SaveOptions, save

logger = logging.getLogger("image_viewer")


def describe(record) -> List[str]:
    """Human-readable summary lines for a record."""
    lines = [
        f"file:     {record.path}",
        f"domain:   {record.domain}",
    ]
    if record.is_audio:
        lines.append(f"channels: {record.width}")
        lines.append(f"frames:   {record.height}")
        lines.append(f"rate:     {record.sample_rate} Hz")
    else:
        lines.append(f"size:     {record.width} x {record.height}")
        lines.append(f"type:     {'color' if record.is_color else 'gray'}")
    lines.append(f"range:    {record.min_value} .. {record.max_value}")
    for message in record.warnings:
        lines.append(f"warning:  {message}")
    return lines


def cmd_info(args) -> int:
    record = load(args.path)
    print("\n".join(describe(record)))
    return 0


def cmd_convert(args) -> int:
    record = load(args.source)
    options = SaveOptions(
        overwrite=not args.no_overwrite,
        create_directories=args.mkdirs,
        pnm_bit_depth=args.bit_depth,
    )
    saved = save(record, args.destination, options)
    print(f"saved {saved}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Inspect and convert images and WAV audio.")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="print dimensions, range and warnings")
    info.add_argument("path", help="image, PNM or WAV file")
    info.set_defaults(func=cmd_info)

    convert = sub.add_parser("convert", help="load a file and save it in another format")
    convert.add_argument("source", help="input file")
    convert.add_argument("destination", help="output file; the suffix picks the format")
    convert.add_argument("--no-overwrite", action="store_true", help="fail if the destination exists")
    convert.add_argument("--mkdirs", action="store_true", help="create missing output directories")
    convert.add_argument("--bit-depth", type=int, choices=[8, 16, 32], default=8,
                         help="sample width for .binary.pgm output")
    convert.set_defaults(func=cmd_convert)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (DecodeError, OSError, ValueError, NotImplementedError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

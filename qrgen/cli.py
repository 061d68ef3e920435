"""qrgen CLI: encode text or binary files into QR Code images."""

import argparse
import sys
from pathlib import Path

from qrgen.ecc import Ecc
from qrgen.errors import QrGenError
from qrgen.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _encode(args):
    from qrgen.segment import make_bytes, make_segments
    from qrgen.symbol import encode_segments

    if args.binary:
        segments = [make_bytes(Path(args.data).read_bytes())]
    else:
        segments = make_segments(args.data)
    return encode_segments(
        segments,
        Ecc.from_letter(args.ecc),
        min_version=args.min_version,
        max_version=args.max_version,
        mask=args.mask,
        boost_ecl=not args.no_boost,
    )


def cmd_encode(args):
    """Encode data and write an image."""
    from qrgen.render import to_image

    qr = _encode(args)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    img = to_image(qr, box_size=args.box_size, border=args.border)
    img.save(output)
    print(f"Generated: {output} ({img.size[0]}x{img.size[1]})")
    print(f"  Version: {qr.version}, ECC: {qr.error_correction_level.name}, Mask: {qr.mask}")


def cmd_show(args):
    """Encode data and print it to the terminal."""
    from qrgen.render import to_text

    qr = _encode(args)
    print(to_text(qr, border=args.border))
    print(f"Version: {qr.version}, ECC: {qr.error_correction_level.name}, Mask: {qr.mask}")


def _add_encoding_args(p: argparse.ArgumentParser):
    p.add_argument("data", help="Text to encode (a file path with --binary)")
    p.add_argument("-e", "--ecc", default="L", choices=["L", "M", "Q", "H"], help="Error correction level")
    p.add_argument("--min-version", type=int, default=1, help="Smallest allowed version")
    p.add_argument("--max-version", type=int, default=40, help="Largest allowed version")
    p.add_argument("-m", "--mask", type=int, default=None, help="Mask pattern 0-7 (auto if omitted)")
    p.add_argument("--no-boost", action="store_true", help="Keep the requested ECC level")
    p.add_argument("--binary", action="store_true", help="Read DATA as a file and encode its bytes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrgen", description="QR Code Model 2 encoder")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- encode ---
    p_enc = subparsers.add_parser("encode", help="Encode data into an image file")
    _add_encoding_args(p_enc)
    p_enc.add_argument("-o", "--output", default="output/qr.png", help="Output file path")
    p_enc.add_argument("--box-size", type=int, default=10, help="Module pixel size")
    p_enc.add_argument("--border", type=int, default=4, help="Quiet zone modules")

    # --- show ---
    p_show = subparsers.add_parser("show", help="Print a QR code to the terminal")
    _add_encoding_args(p_show)
    p_show.add_argument("--border", type=int, default=2, help="Quiet zone modules")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "WARNING"
    setup_logging(level=level, log_file=args.log_file)

    if args.command is None:
        parser.print_help()
        return 1

    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)
    commands = {
        "encode": cmd_encode,
        "show": cmd_show,
    }
    try:
        commands[args.command](args)
    except QrGenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    audit("cli.done", logger=log, command=args.command)
    return 0


if __name__ == "__main__":
    sys.exit(main())

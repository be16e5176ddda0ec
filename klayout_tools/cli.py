#!/usr/bin/env python3
"""Headless entry point for the database-level tools.

Usage:
  klayout-tools compare <ref.gds> <other.gds> [--top-cell NAME] [--flatten]
                        [--layers 1/0,2/0] [--out xor.gds] [--report report.txt]
  klayout-tools stats <file> [--top-cell NAME] [--csv out.csv] [--json out.json]
  klayout-tools hierarchy <file> [--top-cell NAME] [--out hierarchy.txt]

Exit codes: 0 ok (compare: identical), 1 compare found differences,
2 usage / input errors.
"""

import argparse
import sys

from . import common, compare, hierarchy, layer_stats


def parse_layers(text):
    """'1/0,2' -> [(1, 0), (2, 0)]"""
    out = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "/" in part:
            layer, datatype = part.split("/", 1)
        else:
            layer, datatype = part, "0"
        try:
            out.append((int(layer), int(datatype)))
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid layer spec: {part!r}")
    return out


def _top_cell(layout, name):
    if name:
        cell = layout.cell(name)
        if cell is None:
            raise compare.CompareError(f"Cell not found: {name}")
        return cell
    try:
        return layout.top_cell()
    except Exception as e:
        raise compare.CompareError(f"Could not determine top cell: {e}") from e


def cmd_compare(args):
    result = compare.compare_files(
        args.file1,
        args.file2,
        top_cell=args.top_cell or "",
        flatten=args.flatten,
        layers=args.layers,
    )
    report = compare.format_report(result, args.file1, args.file2)
    print(report, end="")
    if args.report:
        common.write_lines(args.report, [report.rstrip("\n")])
    if args.out and not result.identical:
        compare.write_result(result, args.out)
    return 0 if result.identical else 1


def cmd_stats(args):
    layout = compare.load_layout(args.file)
    cell = _top_cell(layout, args.top_cell)
    stats = [s for s in layer_stats.collect_layout_stats(layout, cell) if s is not None]
    for s in stats:
        print("\t".join(s.row()))
    total = layer_stats.summary(stats, cell, layout.dbu)
    print(f"layers={total.layers} shapes={total.shapes} area_um2={total.area:.3f} bbox={total.design_bbox}")
    if args.csv:
        layer_stats.export_csv(args.csv, stats)
    if args.json:
        layer_stats.export_json(args.json, stats)
    return 0


def cmd_hierarchy(args):
    layout = compare.load_layout(args.file)
    cell = _top_cell(layout, args.top_cell)
    root = hierarchy.build_tree(layout, cell)
    lines = hierarchy.export_lines([root])
    if args.out:
        common.write_lines(args.out, lines)
    else:
        print("\n".join(lines))
    return 0


def build_parser():
    ap = argparse.ArgumentParser(prog="klayout-tools")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compare", help="XOR two layout files")
    p.add_argument("file1")
    p.add_argument("file2")
    p.add_argument("--top-cell", default="")
    p.add_argument("--flatten", action="store_true")
    p.add_argument("--layers", type=parse_layers, default=None, help="restrict to e.g. 1/0,2/0")
    p.add_argument("--out", help="write the XOR result layout")
    p.add_argument("--report", help="write the text report")
    p.set_defaults(func=cmd_compare)

    p = sub.add_parser("stats", help="per-layer statistics")
    p.add_argument("file")
    p.add_argument("--top-cell", default="")
    p.add_argument("--csv")
    p.add_argument("--json")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("hierarchy", help="cell hierarchy tree")
    p.add_argument("file")
    p.add_argument("--top-cell", default="")
    p.add_argument("--out")
    p.set_defaults(func=cmd_hierarchy)

    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except compare.CompareError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

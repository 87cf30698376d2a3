"""
Helpers to turn calculation results into a compact, human-readable console
table. Gear trains are drawn on two lines per train: a shaft with two gears
puts one gear on each line and the drive continues on the line of its
output gear, marked by a ``--`` connector.
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from changegears.models.outputs import CalculationResult, TrainResult

CONNECTOR = "--"


def train_rows(train: TrainResult) -> tuple[list[str], list[str]]:
    """Lay out the gears of a train on a top and a bottom line."""
    shafts = train.shafts
    top = [str(shafts[0].output_gear), CONNECTOR]
    bottom = ["", ""]
    output_top = True

    for shaft in shafts[1:-1]:
        if shaft.gear_count == 2:
            if output_top:
                top.append(str(shaft.input_gear))
                bottom.append(str(shaft.output_gear))
            else:
                top.append(str(shaft.output_gear))
                bottom.append(str(shaft.input_gear))
            output_top = not output_top
        elif output_top:
            top.append(str(shaft.input_gear))
            bottom.append("")
        else:
            top.append("")
            bottom.append(str(shaft.input_gear))

        if output_top:
            top.append(CONNECTOR)
            bottom.append("")
        else:
            top.append("")
            bottom.append(CONNECTOR)

    last = str(shafts[-1].input_gear)
    if output_top:
        top.append(last)
        bottom.append("")
    else:
        top.append("")
        bottom.append(last)
    return top, bottom


def format_results_table(result: CalculationResult, max_rows: int = 20) -> list[str]:
    """
    Format the ranked trains as text lines.

    Args:
        result: Calculation result
        max_rows: Max number of trains to show

    Returns:
        Lines of the table, header first
    """
    trains = result.trains[:max_rows]
    if not trains:
        return ["No valid gear trains."]

    rows = [train_rows(train) for train in trains]
    column_count = max(len(top) for top, _ in rows)
    widths = [0] * column_count
    for top, bottom in rows:
        for i, (upper, lower) in enumerate(zip(top, bottom)):
            widths[i] = max(widths[i], len(upper), len(lower))
    gear_width = sum(w + 1 for w in widths)

    header = f"{'Match %':>8} {'Lead mm':>9} {'TPI':>7}  {'Gear train':<{gear_width}} {'Force':>7} {'Dist mm':>8}"
    lines = [header, "-" * len(header)]
    for train, (top, bottom) in zip(trains, rows):
        top_cells = " ".join(cell.rjust(widths[i]) for i, cell in enumerate(top))
        bottom_cells = " ".join(cell.rjust(widths[i]) for i, cell in enumerate(bottom))
        lines.append(
            f"{train.match_percent:>8.2f} {train.lead_mm:>9.3f} {train.tpi:>7.2f}  "
            f"{top_cells:<{gear_width}} {train.max_force:>7.3f} {train.shaft_distance:>8.1f}"
        )
        lines.append(f"{'':>8} {'':>9} {'':>7}  {bottom_cells}".rstrip())
    return lines


def print_results(result: CalculationResult, max_rows: int = 20, file: TextIO | None = None) -> None:
    """Print a human-friendly summary of a calculation result."""
    stats = result.statistics
    print(
        f"Target multiplier: {result.target_multiplier:.5f} | "
        f"{stats.found} valid of {stats.total} arrangements "
        f"({stats.discarded} rejected, {stats.skipped} optimized out)",
        file=file,
    )
    for w in result.warnings:
        print(f"  ! {w}", file=file)
    for line in format_results_table(result, max_rows):
        print(line, file=file)


def print_readable_output(json_path: Path, max_rows: int = 20) -> None:
    """
    Print a saved JSON calculation result as a table.

    Args:
        json_path: Path to the JSON output file.
        max_rows: Max number of trains to show.
    """
    result = CalculationResult.model_validate_json(Path(json_path).read_text())
    print_results(result, max_rows)

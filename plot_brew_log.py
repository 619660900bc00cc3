#!/usr/bin/env python3
"""
Plot and summarize an exported temperature control CSV.

Usage:
    python plot_brew_log.py <csv_file> [options]

Examples:
    python plot_brew_log.py temperature_control_data_20261017T120000Z.csv
    python plot_brew_log.py run.csv --analyze
    python plot_brew_log.py run.csv --save plots/
"""

import argparse
import logging
import sys
from pathlib import Path

from brew_control.analyzer.metrics import PerformanceMetrics
from brew_control.analyzer.plots import HistoryPlotter
from brew_control.history.buffer import read_csv, records_to_arrays
from brew_control.utils.validators import InvalidArgument


def main():
    parser = argparse.ArgumentParser(
        description='Plot temperature control exports',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run.csv
  %(prog)s run.csv --analyze
  %(prog)s run.csv --save output_dir/ --dpi 200
        """
    )
    
    parser.add_argument(
        'csv_file',
        type=str,
        help='Path to exported CSV file'
    )
    
    parser.add_argument(
        '--analyze',
        action='store_true',
        help='Print response metrics'
    )
    
    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip the chart'
    )
    
    parser.add_argument(
        '--save',
        type=str,
        metavar='DIR',
        help='Save the chart to directory instead of displaying'
    )
    
    parser.add_argument(
        '--dpi',
        type=int,
        default=150,
        help='DPI for saved figures (default: 150)'
    )
    
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )
    
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        print(f"Error: CSV file not found: {csv_path}", file=sys.stderr)
        sys.exit(1)
    
    try:
        records = read_csv(csv_path)
    except InvalidArgument as e:
        print(f"Error loading CSV: {e}", file=sys.stderr)
        sys.exit(1)
    
    print(f"Loaded {len(records)} samples from {csv_path}")
    arrays = records_to_arrays(records)
    
    if args.analyze:
        if len(records) < 2:
            print("Need at least 2 samples to analyze", file=sys.stderr)
            sys.exit(1)
        metrics = PerformanceMetrics().from_history(arrays)
        for group, values in metrics.items():
            print(f"\n{group}:")
            for name, value in values.items():
                print(f"  {name}: {value:.4f}")
    
    if args.no_plot:
        return
    
    plotter = HistoryPlotter()
    fig = plotter.plot_history(arrays, title=csv_path.stem)
    
    if args.save:
        save_dir = Path(args.save)
        save_dir.mkdir(parents=True, exist_ok=True)
        filepath = save_dir / f"{csv_path.stem}.png"
        HistoryPlotter.save(fig, str(filepath), dpi=args.dpi)
        print(f"Saved: {filepath}")
    else:
        HistoryPlotter.show()


if __name__ == '__main__':
    main()

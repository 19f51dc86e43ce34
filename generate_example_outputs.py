#!/usr/bin/env python3
import argparse
import os.path
import time

from HeatChart import Chart, OutFormat


def main():
    args_parser = argparse.ArgumentParser()
    example_charts = sorted(Chart.example_names())
    args_parser.add_argument('--chart',
                             choices=example_charts,
                             default=None,
                             help='Which example chart (all by default)')
    args_parser.add_argument('--format',
                             choices=['png', 'svg', 'jpg', 'bmp'],
                             default=None,
                             help='Which file format to write (png and svg by default)')
    cli_args = args_parser.parse_args()
    base_dir = os.path.relpath('examples/')
    os.makedirs(base_dir, exist_ok=True)
    exts = [cli_args.format] if cli_args.format else ['png', 'svg']
    for chart_name in ([cli_args.chart] if cli_args.chart else example_charts):
        print(f'Building example outputs for: {chart_name}')
        chart = Chart.from_example(chart_name)
        for ext in exts:
            try:
                start_time = time.process_time()
                chart_filename = os.path.join(base_dir, f'{chart_name}.HeatChart.{ext}')
                chart.render_to_file(chart_filename)
                print(f' Render time: {round(time.process_time() - start_time, 3)}')
                print(f' {OutFormat.for_filename(chart_filename).value} output for: {chart_name}'
                      f' at: file://{os.path.abspath(chart_filename)}')
            except ValueError:
                print(f'Error processing {chart_name}; Skipping')


if __name__ == '__main__':
    main()

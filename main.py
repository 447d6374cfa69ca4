import argparse
from pathlib import Path

from inventory_dashboard.logger import setup_logger
from inventory_dashboard.pipelines.dashboard import DashboardPipeline


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Compute inventory trend, stock-health and forecast analytics from a CSV upload."
    )
    parser.add_argument("csv_path", nargs="?", type=Path, help="CSV file (defaults to INPUT_DIR/INPUT_FILENAME)")
    parser.add_argument("--detailed", action="store_true", help="Show forecast columns and trend lists")
    parser.add_argument("--local-only", action="store_true", help="Skip the remote forecasting service")
    parser.add_argument("--search", default="", help="Only list products whose name contains this text")
    return parser.parse_args(argv)


def run_dashboard(argv=None):
    """Main orchestration function for one upload."""
    args = parse_args(argv)
    setup_logger()

    pipeline = DashboardPipeline(
        source=args.csv_path,
        use_remote=False if args.local_only else None,
        detailed=args.detailed,
        search=args.search,
    )
    return pipeline.run()


if __name__ == "__main__":
    run_dashboard()

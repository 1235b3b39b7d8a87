#!/usr/bin/env python3
"""
Composite Failure CLI Runner.

This script provides a command-line interface for evaluating composite
failure criteria from YAML job files.

Usage:
    python -m composite_criteria.cli.run_criteria job.yaml [options]

Examples:
    # Run a job
    python -m composite_criteria.cli.run_criteria job.yaml

    # Write the report somewhere else
    python -m composite_criteria.cli.run_criteria job.yaml --output /path/to/results

    # Preview configuration without running
    python -m composite_criteria.cli.run_criteria job.yaml --preview

    # Generate template configuration
    python -m composite_criteria.cli.run_criteria --template > my_job.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

# Template YAML configuration
TEMPLATE_CONFIG = """# Composite Failure Job Configuration
# ===================================
# This file defines a complete composite failure evaluation.

#============================================================================
# JOB
#============================================================================
job:
  name: "composite-job"
  output_directory: "results"   # Report goes to <dir>/Data Files/
  load_equivalent:
    value: 1.0
    units: "Repeats"

#============================================================================
# STRESS HISTORIES (ply principal coordinates)
#============================================================================
stress:
  # Option 1: long-format CSV with columns
  #   location, sample, S11, S22, S33, S12, S13, S23 [, main_id, sub_id]
  file: "stress.csv"
  separator: ","

  # Option 2: inline, location-major lists of n_locations * n_samples values
  # n_locations: 2
  # n_samples: 3
  # s11: [100.0, 200.0, 150.0, -50.0, -80.0, 10.0]
  # s22: [5.0, 8.0, 2.0, 1.0, 0.0, -4.0]
  # s12: [10.0, 12.0, 9.0, 3.0, 2.0, 1.0]

#============================================================================
# MATERIALS (every property is optional; criteria without data are skipped)
#============================================================================
materials:
  - name: "T300/5208"
    fail_stress:
      Xt: 1500.0     # Fiber tensile strength
      Xc: -1500.0    # Fiber compressive strength (sign optional)
      Yt: 40.0       # Transverse tensile strength
      Yc: -246.0     # Transverse compressive strength
      Zt: 40.0       # Through-thickness tensile strength
      Zc: -246.0     # Through-thickness compressive strength
      S: 68.0        # In-plane shear strength
      f12: -0.5      # Tsai-Wu interaction ratio (1-2 plane)
      f23: 0.0       # Tsai-Wu interaction ratio (2-3 plane)
      # B12: 300.0   # Equibiaxial failure stress, overrides f12
      # B23: 200.0   # Equibiaxial failure stress, overrides f23
    fail_strain:
      Xet: 0.0085
      Xec: -0.0085
      Yet: 0.0039
      Yec: -0.0238
      Se: 0.0095
      E: 181000.0    # Young's modulus
      nu: 0.28       # Poisson's ratio (elastic strain estimate)
      # kp: 1200.0   # Cyclic strength coefficient K'
      # np: 0.2      # Cyclic hardening exponent n'
    hashin:
      alpha: 1.0     # Shear weight in fiber tension (0 = Hashin-Rotem)
      Xt: 1500.0
      Xc: 1500.0
      Yt: 40.0
      Yc: 246.0
      SL: 68.0       # Longitudinal shear strength
      ST: 34.0       # Transverse shear strength

# Default material (used when no groups are defined)
material: "T300/5208"

#============================================================================
# GROUPS (optional): contiguous location blocks in stress-file order
#============================================================================
# groups:
#   - name: "skin"
#     material: "T300/5208"
#     size: 120
#   - name: "spar"
#     material: "T300/5208"
#     size: 40
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_template() -> None:
    """Print template configuration to stdout."""
    print(TEMPLATE_CONFIG)


def validate_config(config_path: str) -> bool:
    """Validate configuration file without running."""
    from composite_criteria.core.config import FailureJobConfig

    try:
        config = FailureJobConfig.from_yaml(config_path)
        warnings = config.validate()

        print("Configuration validation:")
        print("=" * 50)
        print(config)

        if warnings:
            print("\nWarnings:")
            for w in warnings:
                print(f"  - {w}")
            return False
        else:
            print("\nConfiguration is valid")
            return True

    except (OSError, ValueError) as e:
        print(f"\nValidation failed: {e}")
        return False


def print_summary(report) -> None:
    """Print the failing-location counts of a finished run."""
    print("\nComposite failure summary")
    print("=" * 50)
    if not report.any_evaluated:
        print("No criteria were evaluated")
        return
    for name, count in report.counts.to_dict().items():
        print(f"  {name:<10} {count:>8d} failing location(s)")


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Evaluate composite failure criteria from YAML job files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s job.yaml                    Run job
  %(prog)s job.yaml --output results   Override output directory
  %(prog)s job.yaml --preview          Preview configuration
  %(prog)s --template > job.yaml       Generate template
        """,
    )

    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML job file",
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Output directory (overrides job.output_directory)",
    )

    parser.add_argument(
        "--preview",
        "-p",
        action="store_true",
        help="Preview configuration without running",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration file",
    )

    parser.add_argument(
        "--template",
        "-t",
        action="store_true",
        help="Print template configuration to stdout",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    # Handle special commands first
    if args.template:
        print_template()
        return 0

    # Require config file for other operations
    if not args.config:
        parser.print_help()
        return 1

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}")
        return 1

    setup_logging(args.verbose)

    # Validate only
    if args.validate:
        return 0 if validate_config(str(config_path)) else 1

    # Preview configuration
    if args.preview:
        from composite_criteria.core.config import FailureJobConfig

        config = FailureJobConfig.from_yaml(str(config_path))
        print(config)
        return 0

    # Run job
    try:
        from composite_criteria.solvers.composite import run_from_yaml

        report = run_from_yaml(str(config_path), args.output)
        print_summary(report)
        return 0

    except KeyboardInterrupt:
        print("\nRun interrupted by user")
        return 130

    except Exception as e:
        logging.exception("Composite failure run failed")
        print(f"\nError: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

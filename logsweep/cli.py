#!/usr/bin/env python3
"""
logsweep command line

Generates an exponential sweep measurement signal, writes it as a WAV file
and prints a JSON summary on stdout.
"""

# Logging goes to stderr so stdout carries only the JSON summary
import sys
import logging
import argparse
import json

from logsweep.config import SweepConfig, DEFAULT_FADE_OUT_TIME, DEFAULT_FREQUENCY_RANGE
from logsweep.errors import SweepError, ConfigurationError
from logsweep.synthesis import synthesize_detailed
from logsweep.sweep_io import write_sweep, PCM_FORMATS


def build_parser():
    parser = argparse.ArgumentParser(
        prog="logsweep",
        description="Generate a repeated exponential sine sweep for impulse response measurement.",
    )
    parser.add_argument("--duration", type=float, help="sweep duration in seconds")
    parser.add_argument("--fade-out", type=float,
                        help=f"fade-out time in seconds (default {DEFAULT_FADE_OUT_TIME})")
    parser.add_argument("--f-low", type=float, help="start frequency in Hz (default 20)")
    parser.add_argument("--f-high", type=float, help="end frequency in Hz (default 24000)")
    parser.add_argument("--sample-rate", type=float, help="sample rate in Hz (default 2 * f-high)")
    parser.add_argument("--repetitions", type=int, help="number of sweeps (default 1)")
    parser.add_argument("--interval", type=float, help="silence between sweeps in seconds (default duration)")
    parser.add_argument("--config", help="JSON file with sweep parameters; options override it")
    parser.add_argument("--output", default="sweep.wav", help="WAV destination (default sweep.wav)")
    parser.add_argument("--format", default="PCM_16", choices=sorted(PCM_FORMATS), help="WAV sample format")
    parser.add_argument("--amplitude", type=float, default=1.0, help="linear output gain (default 1.0)")
    parser.add_argument("--plot", help="save a PNG of the composite and its spectrum here")
    return parser


def config_from_args(args):
    """Merge the optional JSON config file with command line options."""
    values = {}
    if args.config:
        with open(args.config) as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file {args.config} must hold a mapping of sweep parameters")
        values.update(loaded)

    overrides = {
        "sweep_duration": args.duration,
        "fade_out_time": args.fade_out,
        "sample_rate": args.sample_rate,
        "repetition_count": args.repetitions,
        "inter_sweep_interval": args.interval,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    if args.f_low is not None or args.f_high is not None:
        try:
            low, high = values.get("frequency_range") or DEFAULT_FREQUENCY_RANGE
        except (TypeError, ValueError):
            raise ConfigurationError("frequency_range must be a (low, high) pair") from None
        values["frequency_range"] = (
            args.f_low if args.f_low is not None else low,
            args.f_high if args.f_high is not None else high,
        )

    return SweepConfig.from_dict(values)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format='[LOGSWEEP] %(asctime)s - %(levelname)s - %(message)s',
                        stream=sys.stderr)
    args = build_parser().parse_args(argv)
    logging.info(f"Command line arguments: {argv if argv is not None else sys.argv[1:]}")

    try:
        config = config_from_args(args).resolve()
        signals = synthesize_detailed(config)
        write_sweep(args.output, signals.composite, config.sample_rate, args.format, args.amplitude)

        if args.plot:
            # Imported here so plain generation does not need a plotting backend
            from logsweep.plotting import plot_sweep
            plot_sweep(signals.as_result(), config.sample_rate, output_path=args.plot)
    except (SweepError, ValueError, OSError) as e:
        error_msg = f"Sweep generation failed: {e}"
        logging.error(error_msg)
        print(json.dumps({"error": error_msg}))
        return 1

    result = {
        "output": args.output,
        "config": config.to_dict(),
        "single_length": len(signals.single),
        "composite_length": len(signals.composite),
        "offsets": signals.offsets.tolist(),
        "cutoff_index": signals.cutoff_index,
    }
    print(json.dumps(result))
    logging.info("Sweep generation completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())

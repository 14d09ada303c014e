import argparse

from lfg_core import ConfigError, ConfigLoader, DungeonQueueSystem, Reporter


def non_negative_float(text):
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {text}")
    return value


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Dungeon party queue simulator")
    p.add_argument("--config", default="config.txt", help="key value config file")
    p.add_argument("--seed", type=int, default=None, help="random seed for clear times")
    p.add_argument(
        "--time-scale",
        type=non_negative_float,
        default=1.0,
        help="wall-clock seconds per simulated second",
    )
    p.add_argument("--quiet", action="store_true", help="only print the final summary")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        config = ConfigLoader(args.config).load()
    except ConfigError as e:
        print(f"[ERROR] {e.message}")
        return 1

    system = DungeonQueueSystem(config, seconds_per_unit=args.time_scale, seed=args.seed)
    reporter = Reporter(
        system.pool,
        system.role_queue,
        records=system.records,
        show_events=not args.quiet,
    )
    system.manager.add_listener(on_enter=reporter.party_entered, on_complete=reporter.party_completed)

    reporter.show_inputs(config)
    if not args.quiet:
        reporter.show_status()

    system.run()

    reporter.show_summary()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

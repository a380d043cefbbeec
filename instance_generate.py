import logging

from dynurg_gen import DatasetGenerator, GeneratorError
from dynurg_gen.configs.load_config import FamilyConfig, load_generator_config


def parse_family(text):
    """'name:lb:ub:num_levels' -> FamilyConfig."""
    try:
        name, lb, ub, num_levels = text.split(":")
        return FamilyConfig(name, float(lb), float(ub), int(num_levels))
    except ValueError as e:
        raise ValueError(f"Family must look like name:lb:ub:num_levels, got '{text}'") from e


def build_config(args):
    config = load_generator_config(args.config_path)

    overrides = {}
    if args.seed is not None:
        overrides["rng_seed"] = args.seed
    if args.location_mode is not None:
        overrides["location_mode"] = args.location_mode
    if args.urgency_levels is not None:
        overrides["urgency_levels"] = tuple(args.urgency_levels)
    if args.families is not None:
        by_name = {f.name: f for f in config.families}
        families = []
        for fam in args.families:
            # bare names select a configured family, full specs define a new one
            families.append(by_name[fam] if fam in by_name else parse_family(fam))
        overrides["families"] = tuple(families)
    if args.target_num_instances is not None:
        overrides["target_num_instances"] = args.target_num_instances
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    if args.save_path is not None:
        overrides["dataset_dir"] = args.save_path

    return config.replace(**overrides) if overrides else config


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate a PDPTW dataset with controlled dynamism and urgency."
    )
    parser.add_argument(
        "--config_path",
        type=str,
        default=None,
        help="Path to the configuration file (defaults to the packaged config.yaml)."
    )
    parser.add_argument(
        "--save_path",
        type=str,
        default=None,
        help="Directory to save generated instances (overrides dataset_dir)."
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Master random seed."
    )
    parser.add_argument(
        "--location_mode",
        type=str,
        choices=["distinct", "fixed"],
        default=None,
        help="'distinct': new locations per scenario, 'fixed': one shared location list."
    )
    parser.add_argument(
        "--urgency_levels",
        type=int,
        nargs="+",
        default=None,
        help="Urgency levels in minutes, e.g. 0 5 10."
    )
    parser.add_argument(
        "--families",
        type=str,
        nargs="+",
        default=None,
        help="Arrival families: configured names (sine, homogeneous, normal, uniform) "
             "or name:lb:ub:num_levels."
    )
    parser.add_argument(
        "--target_num_instances",
        type=int,
        default=None,
        help="Instances per dynamism bin."
    )
    parser.add_argument(
        "--max_attempts",
        type=int,
        default=None,
        help="Abort a configuration after this many candidates."
    )
    parser.add_argument(
        "--no_progress",
        action='store_true',
        help="Disable the progress bars."
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level."
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    gen = DatasetGenerator(config, show_progress=not args.no_progress)
    try:
        gen.generate()
    except GeneratorError as e:
        logging.getLogger("instance_generate").error("Generation aborted: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

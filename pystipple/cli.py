import argparse
import logging
import sys
import time

from .config import load_config, validate_config
from .errors import StippleError
from .export import scale_points
from .files import read_image, save_raster, write_points_csv
from .render import render_stipples
from .stipple import VoronoiStippler

logger = logging.getLogger(__name__)


def run(image_path, cfg):
    """Stipple one image file and write the render and coordinates."""
    I = read_image(image_path)
    stippler = VoronoiStippler(I, seed=cfg.stipple.random_seed, contrast=cfg.stipple.contrast)

    logger.info("Initializing stipples...")
    stippler.initialize(cfg.stipple.stipple_count)

    if len(stippler) == 0:
        logger.warning("No stipples could be placed on %s; is it blank?", image_path)
    else:
        max_iterations = cfg.stipple.max_iterations

        def report(iteration, displacement):
            logger.info("Lloyd's algorithm: iteration %d/%d, mean displacement %.4f",
                        iteration, max_iterations, displacement)
            return True

        logger.info("Running Lloyd's algorithm...")
        start = time.time()
        result = stippler.relax(max_iterations, cfg.stipple.convergence_threshold, callback=report)
        logger.info("Finished in %.2f seconds (%s)", time.time() - start, result.state.value)

    scale = cfg.render.scale_factor
    X = scale_points(stippler.generators, scale)
    size = (max(1, int(stippler.width * scale)), max(1, int(stippler.height * scale)))
    raster = render_stipples(X, size, cfg.render.disc_radius)
    save_raster(raster, cfg.output.render_path)
    write_points_csv(X, cfg.output.csv_path)
    return X


def main(argv=None):
    """Main CLI entry point for PyStipple."""
    parser = argparse.ArgumentParser(
        description="PyStipple - Convert images to weighted Voronoi stipple drawings",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('image', type=str, help='Input image path')
    parser.add_argument('--config', type=str, help='Path to YAML configuration file')
    parser.add_argument('--stipples', type=int, help='Override number of stipples')
    parser.add_argument('--iterations', type=int, help='Override maximum Lloyd iterations')
    parser.add_argument('--threshold', type=float, help='Override convergence threshold')
    parser.add_argument('--seed', type=int, help='Override random seed')
    parser.add_argument('--radius', type=float, help='Override stipple disc radius')
    parser.add_argument('--scale', type=float, help='Override output scale factor')
    parser.add_argument('--output', type=str, help='Output PNG path')
    parser.add_argument('--csv', type=str, help='Output coordinate CSV path')
    parser.add_argument('--log-level', type=str, help='Logging level (DEBUG, INFO, ...)')
    parser.add_argument('overrides', nargs='*', help='Additional config overrides')

    args = parser.parse_args(argv)

    overrides = []
    if args.stipples is not None:
        overrides.append(f'stipple.stipple_count={args.stipples}')
    if args.iterations is not None:
        overrides.append(f'stipple.max_iterations={args.iterations}')
    if args.threshold is not None:
        overrides.append(f'stipple.convergence_threshold={args.threshold}')
    if args.seed is not None:
        overrides.append(f'stipple.random_seed={args.seed}')
    if args.radius is not None:
        overrides.append(f'render.disc_radius={args.radius}')
    if args.scale is not None:
        overrides.append(f'render.scale_factor={args.scale}')
    if args.output:
        overrides.append(f'output.render_path={args.output}')
    if args.csv:
        overrides.append(f'output.csv_path={args.csv}')
    if args.log_level:
        overrides.append(f'logging.level={args.log_level}')
    overrides.extend(args.overrides)

    logging.basicConfig(
        level=(args.log_level or 'INFO').upper(),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    )

    try:
        cfg = load_config(args.config, overrides)
        validate_config(cfg)
        logging.getLogger().setLevel(cfg.logging.level.upper())
        run(args.image, cfg)
    except StippleError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

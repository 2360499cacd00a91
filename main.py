import sys
import json
import logging
import argparse
from pathlib import Path

from design_surface import APP_TITLE, DesignSurface, load_config, validate_background_config

logger = logging.getLogger("design_surface")


def check_product(path: Path, config_path: Path | None = None) -> bool:
    config = load_config(config_path) if config_path else load_config(Path.cwd() / "surface_config.json")
    product = json.loads(path.read_text(encoding="utf-8"))
    surface = DesignSurface.from_record(product, config)
    frame = surface.frame()
    logger.info(f"Print area:   {frame.print_area}")
    logger.info(f"Bleed bounds: {frame.bleed_bounds}")
    if frame.mapped_bounds is not None:
        logger.info(f"Mapped onto background: {frame.mapped_bounds}")
    result = surface.validate()
    report = validate_background_config(product, config.display_size)
    errors = result.errors + [e for e in report.background_image_errors + report.mapping_errors if e not in result.errors]
    for err in errors:
        logger.error(err)
    print(json.dumps({"valid": not errors, "errors": errors, "frame": frame.to_record()}, indent=2))
    return not errors


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s %(name)s] [%(levelname)s] %(message)s")
    parser = argparse.ArgumentParser(prog="design-surface", description=f"{APP_TITLE}: check a product's print geometry")
    parser.add_argument("product", type=Path, help="product JSON record")
    parser.add_argument("--config", type=Path, default=None, help="surface config JSON")
    args = parser.parse_args()
    sys.exit(0 if check_product(args.product, args.config) else 1)

import sys
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from skilltree.buildcode import BuildCodec
from skilltree.catalog import CatalogError, load_catalog
from skilltree.compositor import compose


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("CatalogVerification")

    catalog_path = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        # Load and check graph invariants
        logger.info("Loading catalog...")
        catalog = load_catalog(catalog_path)

        # Full build must survive a round trip
        codec = BuildCodec(catalog)
        everything = frozenset(catalog.ids)
        code = codec.encode(everything)
        assert codec.decode(code) == everything, "Full build does not round-trip"

        # Maximum stacked modifiers
        modifiers = compose(everything, catalog)
        for stat, value in modifiers.as_stat_dict().items():
            logger.info(f"  {stat.key:<24} {value:g}")
        logger.info(f"  behaviors: {len(modifiers.behaviors)}")

        total_cost = sum(node.cost for node in catalog)
        logger.info(f"Full build: {code} ({total_cost} SP)")
        logger.info(f"VERIFICATION SUCCESSFUL: {len(catalog)} nodes loaded and validated.")

    except (CatalogError, AssertionError) as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

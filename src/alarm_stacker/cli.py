import argparse
import logging
import os
import sys

from . import core


def run() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    opts = core.CommandOpts(None, False, False, None)

    argparser = argparse.ArgumentParser(description="CloudWatch alarm stacks from declarative config")
    argparser.add_argument("-c", "--config-file")
    argparser.add_argument("-p", "--preview", action="store_true", dest="preview")
    argparser.add_argument("--delete-stale-alarms", action="store_true", dest="delete_stale_alarms")
    argparser.add_argument("-w", "--max-workers", type=int, dest="max_workers")
    args = argparser.parse_args(namespace=opts)

    logger.debug("commandline opts:%s", opts)

    report = core.main(args)
    if not report.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    run()

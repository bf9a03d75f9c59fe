import os
import sys
import logging
import argparse
from typing import List, Optional

from dotenv import load_dotenv

from usdn_ops.config import ScannerConfig
from usdn_ops.tasks.slash_finder import SlashFinder
from usdn_ops.utils.contracts import connect


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find slashable positions")
    parser.add_argument('-r', '--rpc-url', default=os.getenv('RPC_URL'), help="RPC URL (https)")
    parser.add_argument('-d', '--debug', action='store_true', help="output extra debugging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    # 加载环境变量
    load_dotenv()
    args = parse_args(argv)

    if not args.rpc_url:
        print("Please specify the RPC URL", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout
    )

    config = ScannerConfig(rpc_url=args.rpc_url)
    try:
        web3 = connect(config.rpc_url, config.request_timeout)
    except ConnectionError as e:
        print(str(e), file=sys.stderr)
        return 1

    SlashFinder.from_config(web3, config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())

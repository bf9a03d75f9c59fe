import os
import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from usdn_ops.config import VerifierConfig, VERIFY_CONFIG
from usdn_ops.tasks.contract_verifier import ContractVerifier
from usdn_ops.utils.broadcast import Broadcast, BroadcastFormatError

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify contract from broadcast file")
    parser.add_argument('path', help="path to the broadcast file")
    parser.add_argument(
        '-e', '--etherscan-api-key',
        default=os.getenv('ETHERSCAN_API_KEY'),
        help="The Etherscan (or equivalent) API key"
    )
    parser.add_argument(
        '--verifier-url',
        default=os.getenv('VERIFIER_URL'),
        help="The verifier URL, if using a custom provider"
    )
    parser.add_argument(
        '--out-dir',
        default=VERIFY_CONFIG['out_dir'],
        help="forge build output directory"
    )
    parser.add_argument('-d', '--debug', action='store_true', help="output extra debugging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    # 加载环境变量
    load_dotenv()
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stdout
    )

    if not args.etherscan_api_key:
        print("Please specify the Etherscan API key", file=sys.stderr)
        return 1

    config = VerifierConfig(
        etherscan_api_key=args.etherscan_api_key,
        verifier_url=args.verifier_url,
        debug=args.debug,
        out_dir=Path(args.out_dir)
    )
    logger.debug("verifierUrl : %s", config.verifier_url)
    logger.debug("broadcastPath : %s", args.path)

    if not os.path.isfile(args.path):
        print("\nPlease provide a valid broadcast file")
        return 1

    try:
        broadcast = Broadcast.load(args.path)
    except BroadcastFormatError as e:
        print(f"Invalid broadcast file: {e}", file=sys.stderr)
        return 1

    ContractVerifier(config).verify_broadcast(broadcast)
    return 0


if __name__ == "__main__":
    sys.exit(main())

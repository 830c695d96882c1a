import argparse
import json
import logging
import sys
from typing import Optional, List

from .config import ClientConfig
from .constants import (
    DEFAULT_VIDEO_MODEL,
    DEFAULT_DURATION,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_IMAGE_AGENT_ID,
    KNOWN_VIDEO_MODELS,
    MIN_BALANCE,
)
from .core.errors import ClawdvineError, InputError, SubmissionError, RemoteJobFailure
from .core.explorer import explorer_url
from .core.generation import GenerationClient
from .core.models import GenerationRequest
from .core.payment import resolve_payment_session
from .core.wallet import EvmWallet
from .logging_config import configure_logging
from . import reporting
from .tools import check_balance, generate_image, iter_image_content, sign_siwe_headers

logger = logging.getLogger("clawdvine_sdk.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clawdvine", description="ClawdVine x402 media client")
    parser.add_argument("--env-file", type=str, default=None, help="Path to a .env file")
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Pay for a video generation and wait for it")
    gen.add_argument("prompt", type=str)
    gen.add_argument("--model", type=str, default=DEFAULT_VIDEO_MODEL,
                     help=f"Video model ({', '.join(KNOWN_VIDEO_MODELS)})")
    gen.add_argument("--duration", type=int, default=DEFAULT_DURATION, help="Duration in seconds")
    gen.add_argument("--agent-id", type=str, default=None, help="Defaults to CLAWDVINE_AGENT_ID")
    gen.add_argument("--aspect-ratio", type=str, default=DEFAULT_ASPECT_RATIO)
    gen.add_argument("--image", dest="image_data", type=str, default=None,
                     help="Image URL or data: URI for image-to-video")
    gen.add_argument("--json", action="store_true", help="Print the final result as JSON")

    img = sub.add_parser("image", help="Pay for a single image generation")
    img.add_argument("prompt", type=str)
    img.add_argument("--aspect-ratio", type=str, default=DEFAULT_ASPECT_RATIO)
    img.add_argument("--agent-id", type=str, default=None)

    bal = sub.add_parser("balance", help="Check the $CLAWDVINE balance of an address on Base")
    bal.add_argument("address", nargs="?", default=None, help="Defaults to the EVM_PRIVATE_KEY address")

    sub.add_parser("siwe", help="Print Sign-In with Ethereum headers for the API")
    return parser


def cmd_generate(args, config: ClientConfig) -> int:
    request = GenerationRequest(
        prompt=args.prompt,
        model=args.model,
        duration=args.duration,
        aspect_ratio=args.aspect_ratio,
        agent_id=args.agent_id or config.agent_id,
        image_data=args.image_data,
    )
    config.validate(require_payer=True)
    session = resolve_payment_session(config)
    out = sys.stderr if args.json else sys.stdout
    print(f"💳 Payment: {session.network} USDC", file=out)

    client = GenerationClient(
        session,
        api_base=config.api_base,
        on_progress=reporting.progress_printer(out),
        timeout=config.request_timeout,
        share_base=config.share_base,
    )
    reporting.print_request(request, out)
    result = client.run(
        request,
        on_submitted=lambda submission, policy: reporting.print_submission(submission, policy, client.network, out),
    )

    if args.json:
        data = result.to_dict()
        if result.tx_hash:
            data["explorer"] = explorer_url(result.tx_hash, client.network, result.explorer)
        print(json.dumps(data, indent=2))
    else:
        reporting.print_result(result, client.network, out)
    return 0


def cmd_image(args, config: ClientConfig) -> int:
    config.validate(require_payer=True)
    session = resolve_payment_session(config)
    agent_id = args.agent_id or config.agent_id or DEFAULT_IMAGE_AGENT_ID
    print(f"💳 Payment: {session.network} USDC")
    print("\n🖼️  Generating image...")
    print(f'   Prompt: "{args.prompt[:80]}{"..." if len(args.prompt) > 80 else ""}"')
    print(f"   Ratio:  {args.aspect_ratio}")
    print(f"   Agent:  {agent_id}\n")

    body = generate_image(session, args.prompt, args.aspect_ratio, agent_id, api_base=config.api_base)
    parts = list(iter_image_content(body))
    if not parts:
        print(json.dumps(body, indent=2))
        return 1 if isinstance(body, dict) and body.get("error") else 0
    for kind, value in parts:
        print(value if kind == "text" else f"🖼️  Image: {value}")
    return 0


def cmd_balance(args, config: ClientConfig) -> int:
    address = args.address
    if not address and config.evm_private_key:
        address = EvmWallet(config.evm_private_key).address
    if not address:
        raise InputError("Usage: clawdvine balance <address>  (or set EVM_PRIVATE_KEY)")

    output = check_balance(address, rpc_url=config.rpc_url)
    print(json.dumps(output, indent=2))
    if not output["eligible"]:
        print(f"\n⚠️  Insufficient balance: {output['balance']} / {MIN_BALANCE:,} $CLAWDVINE required", file=sys.stderr)
        return 1
    return 0


def cmd_siwe(args, config: ClientConfig) -> int:
    if not config.evm_private_key:
        raise InputError("EVM_PRIVATE_KEY env var is required (0x-prefixed hex)")
    headers = sign_siwe_headers(EvmWallet(config.evm_private_key))
    print(json.dumps(headers, indent=2))
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "image": cmd_image,
    "balance": cmd_balance,
    "siwe": cmd_siwe,
}


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; every failure here is 1
        return 0 if e.code in (0, None) else 1
    try:
        config = ClientConfig.from_env(args.env_file)
        configure_logging(args.log_level or config.log_level, config.log_file)
        return COMMANDS[args.command](args, config)
    except SubmissionError as e:
        logger.error(str(e), extra={"context": {"status_code": e.status_code}})
        print(f"❌ {e}: {e.body}" if e.body else f"❌ {e}", file=sys.stderr)
        return 1
    except RemoteJobFailure as e:
        print(f"\n❌ {e}", file=sys.stderr)
        return 1
    except ClawdvineError as e:
        logger.error(str(e))
        print(f"\n❌ {e}" if not isinstance(e, InputError) else f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted; the remote job keeps running.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Command line access to a running wordexpr query service."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Tuple

import httpx
from rich.console import Console
from rich.markup import escape

from wordexpr.client import ModelClient
from wordexpr.errors import DecodeError, WordExprError
from wordexpr.expressions import Expression

console = Console()


def _parse_pair(raw: str) -> Tuple[Expression, Expression]:
    if "|" not in raw:
        raise DecodeError(f"pair must look like 'A|B', got {raw!r}")
    left, right = raw.split("|", 1)
    return Expression.parse(left), Expression.parse(right)


def _client(args: argparse.Namespace) -> ModelClient:
    return ModelClient(args.api, timeout=args.timeout)


def _command_sim(args: argparse.Namespace) -> int:
    value = _client(args).similarity(Expression.parse(args.a), Expression.parse(args.b))
    print(f"{value:.6f}")
    return 0


def _command_sim_multi(args: argparse.Namespace) -> int:
    pairs = [_parse_pair(raw) for raw in args.pair]
    values = _client(args).batch_similarity(pairs)
    for raw, value in zip(args.pair, values):
        print(f"{value:.6f}\t{raw}")
    return 0


def _command_most_sim(args: argparse.Namespace) -> int:
    matches = _client(args).most_similar(Expression.parse(args.expr), args.n)
    for match in matches:
        print(f"{match.score:.6f}\t{match.term}")
    return 0


def _command_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from app.config import get_settings
    from app.main import app

    # The lifespan hook reads this same cached settings object.
    settings = get_settings()
    if args.model:
        settings.model_path = args.model
    if args.format:
        settings.model_format = args.format

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordexpr",
        description="Similarity queries over word vector expressions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_remote_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--api",
            default="http://localhost:1234",
            help="wordexpr API base URL (default: http://localhost:1234).",
        )
        sub.add_argument(
            "--timeout",
            type=float,
            default=30.0,
            help="HTTP timeout per request in seconds (default: 30).",
        )

    sim_parser = subparsers.add_parser("sim", help="Similarity between two expressions.")
    sim_parser.add_argument("a", help="First expression, e.g. 'king -man +woman'.")
    sim_parser.add_argument("b", help="Second expression.")
    add_remote_options(sim_parser)
    sim_parser.set_defaults(func=_command_sim)

    multi_parser = subparsers.add_parser("sim-multi", help="Similarities for several pairs.")
    multi_parser.add_argument(
        "--pair",
        "-p",
        action="append",
        required=True,
        help="Expression pair 'A|B'; repeat for more pairs.",
    )
    add_remote_options(multi_parser)
    multi_parser.set_defaults(func=_command_sim_multi)

    most_parser = subparsers.add_parser("most-sim", help="Words closest to an expression.")
    most_parser.add_argument("expr", help="Expression to search around.")
    most_parser.add_argument("-n", type=int, default=10, help="Number of matches (default: 10).")
    add_remote_options(most_parser)
    most_parser.set_defaults(func=_command_most_sim)

    serve_parser = subparsers.add_parser("serve", help="Run the query service.")
    serve_parser.add_argument("--host", default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")
    serve_parser.add_argument("--model", "-m", default=None, help="Path to a word2vec file.")
    serve_parser.add_argument(
        "--format",
        choices=["binary", "text"],
        default=None,
        help="word2vec file format (default: binary).",
    )
    serve_parser.set_defaults(func=_command_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except WordExprError as exc:
        console.print(f"[red]Query failed:[/] {escape(str(exc))}", soft_wrap=True)
        return 1
    except httpx.HTTPError as exc:
        console.print(f"[red]Request failed:[/] {escape(str(exc))}", soft_wrap=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

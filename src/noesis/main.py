"""
Noesis CLI — assemble a kernel from config and talk to it.

Usage:
    noesis check [--config FILE] [--json]
    noesis ask PROMPT [--config FILE] [--max-tokens N] [--temperature T] [--stream]
    noesis run SKILL FUNCTION [INPUT] [--var NAME=VALUE]... [--config FILE]
    noesis remember COLLECTION TEXT [--id ID] [--config FILE]
    noesis recall COLLECTION QUERY [--limit N] [--relevance R] [--config FILE]

Without --config, settings come from NOESIS_* environment variables
(and .env). A configuration error exits with status 2 before anything
else happens.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid

import noesis.core.config as config_module
from noesis.core.config import NoesisConfig, load_config
from noesis.core.errors import BackendError, ConfigurationError, SkillNotFoundError
from noesis.core.logging import setup_logging
from noesis.kernel.builder import KernelFactory
from noesis.kernel.core import Kernel
from noesis.providers.base import CompletionSettings

logger = logging.getLogger("noesis.cli")

EXIT_CONFIG = 2
EXIT_BACKEND = 3


def _load(args) -> NoesisConfig:
    if args.config:
        return load_config(args.config)
    return config_module.reload_config()


def _parse_vars(pairs: list[str]) -> dict[str, str]:
    variables = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"--var expects NAME=VALUE, got '{pair}'")
        variables[name] = value
    return variables


def cmd_check(args, kernel: Kernel) -> int:
    """Show what got assembled."""
    report = kernel.registration
    summary = {
        "completion": repr(kernel.completion),
        "embedding": repr(kernel.memory.embedder),
        "store": repr(kernel.memory.storage),
        "skills": kernel.skills.describe(),
        "failed_skills": (
            {o.name: o.error for o in report.failed} if report is not None else {}
        ),
    }
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Completion: {summary['completion']}")
        print(f"Embedding:  {summary['embedding']}")
        print(f"Store:      {summary['store']}")
        print("Skills:")
        for skill, functions in summary["skills"].items():
            print(f"  {skill}: {', '.join(functions)}")
        for name, error in summary["failed_skills"].items():
            print(f"  ! {name}: {error}")
    return 0


async def cmd_ask(args, kernel: Kernel) -> int:
    settings = CompletionSettings(max_tokens=args.max_tokens, temperature=args.temperature)
    if args.stream:
        async for chunk in kernel.completion.complete_stream(args.prompt, settings):
            print(chunk, end="", flush=True)
        print()
    else:
        print(await kernel.generate_completion(args.prompt, settings))
    return 0


async def cmd_run(args, kernel: Kernel) -> int:
    variables = _parse_vars(args.var)
    text = variables.pop("input", args.input)
    print(await kernel.run(args.skill, args.function, text, **variables))
    return 0


async def cmd_remember(args, kernel: Kernel) -> int:
    key = await kernel.save_memory(args.collection, args.text, id=args.id or str(uuid.uuid4()))
    print(key)
    return 0


async def cmd_recall(args, kernel: Kernel) -> int:
    results = await kernel.recall(
        args.collection, args.query, limit=args.limit, min_relevance_score=args.relevance
    )
    for result in results:
        print(f"{result.relevance:.3f}  {result.metadata.text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="noesis", description="Configuration-driven kernel")
    parser.add_argument("--config", help="JSON configuration file (default: environment)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_check = subparsers.add_parser("check", help="Assemble a kernel and show its backends")
    p_check.add_argument("--json", action="store_true", help="Output as JSON")

    p_ask = subparsers.add_parser("ask", help="Send a prompt to the completion backend")
    p_ask.add_argument("prompt")
    p_ask.add_argument("--max-tokens", type=int, default=256)
    p_ask.add_argument("--temperature", type=float, default=0.7)
    p_ask.add_argument("--stream", action="store_true", help="Print tokens as they arrive")

    p_run = subparsers.add_parser("run", help="Invoke a skill function")
    p_run.add_argument("skill")
    p_run.add_argument("function")
    p_run.add_argument("input", nargs="?", default="")
    p_run.add_argument("--var", action="append", default=[], help="NAME=VALUE")

    p_remember = subparsers.add_parser("remember", help="Save text to memory")
    p_remember.add_argument("collection")
    p_remember.add_argument("text")
    p_remember.add_argument("--id", default="")

    p_recall = subparsers.add_parser("recall", help="Search memory")
    p_recall.add_argument("collection")
    p_recall.add_argument("query")
    p_recall.add_argument("--limit", type=int, default=3)
    p_recall.add_argument("--relevance", type=float, default=0.7)

    return parser


_ASYNC_COMMANDS = {
    "ask": cmd_ask,
    "run": cmd_run,
    "remember": cmd_remember,
    "recall": cmd_recall,
}


async def _run_async(command, args, factory: KernelFactory, kernel: Kernel) -> int:
    try:
        return await command(args, kernel)
    finally:
        await factory.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = _load(args)
        factory = KernelFactory(config)
        kernel = factory.create()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.command == "check":
        try:
            return cmd_check(args, kernel)
        finally:
            asyncio.run(factory.aclose())

    try:
        return asyncio.run(_run_async(_ASYNC_COMMANDS[args.command], args, factory, kernel))
    except BackendError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Backend error: {e}", file=sys.stderr)
        return EXIT_BACKEND
    except (SkillNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

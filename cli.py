#!/usr/bin/env python3
"""Simple CLI for asking SuiSage questions locally"""

import argparse
import asyncio
import json
from typing import Any, Dict, Optional

import httpx

from suisage.config import settings
from suisage.core.agent import SuiSageAgent
from suisage.core.symbols import SymbolResolver
from suisage.logging_config import setup_logging
from suisage.providers import AftermathProvider
from suisage.providers.llm import get_llm_provider
from suisage.types import QueryResponse


def print_response(payload: Dict[str, Any], show_results: bool = False) -> None:
    """Pretty print a status-keyed query response"""
    status = payload.get("status")

    if status == "success":
        print(f"\n🤖 {payload.get('final_answer', '')}")
        if payload.get("reasoning"):
            print(f"\n💭 {payload['reasoning']}")
        if show_results:
            print("\nResults:")
            print("-" * 50)
            for i, result in enumerate(payload.get("results", []), 1):
                print(f"{i:2d}. {result['tool']} {json.dumps(result['input'])}")
                print(json.dumps(result["output"], indent=2))
    elif status == "needs_info":
        print(f"\n❓ {payload.get('request', '')}")
    else:
        print(f"\n❌ Error: {payload.get('error', 'Unknown error occurred')}")


async def _build_agent(
    provider: Optional[str],
    model: Optional[str],
    market: AftermathProvider,
) -> SuiSageAgent:
    llm = get_llm_provider(provider_name=provider, model=model)
    symbols = SymbolResolver.from_file(settings.symbols_file)
    return SuiSageAgent.build(llm, market, symbols, default_network=settings.default_network)


async def _answer_locally(agent: SuiSageAgent, query: str) -> QueryResponse:
    try:
        return await asyncio.wait_for(agent.answer(query), timeout=settings.query_timeout_seconds)
    except asyncio.TimeoutError:
        return QueryResponse.failure(f"Query timed out after {settings.query_timeout_seconds:g} seconds")


async def cli_ask(query: str, provider: Optional[str], model: Optional[str], show_results: bool) -> None:
    """Answer one question in-process"""
    async with AftermathProvider() as market:
        agent = await _build_agent(provider, model, market)
        try:
            response = await _answer_locally(agent, query)
        finally:
            await agent.interpreter.llm.close()
    print_response(response.to_payload(), show_results)


async def cli_remote(query: str, server: str, show_results: bool) -> None:
    """Send one question to a running SuiSage server"""
    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"{server.rstrip('/')}/api/query",
            json={"query": query},
            timeout=settings.query_timeout_seconds + 5,
        )
        if response.status_code >= 500 or response.status_code == 422:
            response.raise_for_status()
        print_response(response.json(), show_results)


async def cli_chat(provider: Optional[str], model: Optional[str], show_results: bool) -> None:
    """Interactive question loop"""
    print("🤖 SuiSage")
    print("Type 'exit' to quit, 'help' for commands")
    print("-" * 40)

    async with AftermathProvider() as market:
        agent = await _build_agent(provider, model, market)
        try:
            while True:
                try:
                    user_input = input("\n💬 You: ").strip()
                except (KeyboardInterrupt, EOFError):
                    print("\nGoodbye! 👋")
                    break

                if user_input.lower() in ["exit", "quit", "q"]:
                    print("Goodbye! 👋")
                    break
                elif user_input.lower() in ["help", "h"]:
                    print("\nCommands:")
                    print("  help    - Show this help")
                    print("  exit    - Quit")
                    print("  symbols - List supported coins")
                    print("  What is the price of SUI? - Ask anything about Sui markets")
                    continue
                elif user_input.lower() == "symbols":
                    for symbol, coin_type in agent.executor.symbols:
                        print(f"  {symbol:<8} {coin_type}")
                    continue
                elif not user_input:
                    continue

                response = await _answer_locally(agent, user_input)
                print_response(response.to_payload(), show_results)
        finally:
            await agent.interpreter.llm.close()


def cli_symbols() -> None:
    symbols = SymbolResolver.from_file(settings.symbols_file)
    for symbol, coin_type in symbols:
        print(f"{symbol:<8} {coin_type}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SuiSage CLI")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command")

    def add_llm_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--provider", help="LLM provider (anthropic, atoma)")
        sub.add_argument("--model", help="LLM model id")
        sub.add_argument("--show-results", action="store_true", help="Print raw tool results")

    ask_parser = subparsers.add_parser("ask", help="Answer a single question")
    ask_parser.add_argument("query", help="Question about Sui DeFi markets")
    ask_parser.add_argument("--server", help="Send to a running server instead (e.g. http://localhost:3001)")
    add_llm_options(ask_parser)

    chat_parser = subparsers.add_parser("chat", help="Interactive question loop")
    add_llm_options(chat_parser)

    subparsers.add_parser("symbols", help="List supported coin symbols")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    setup_logging(args.log_level)
    command = args.command.lower()

    if command == "symbols":
        cli_symbols()
        return
    if command not in ("ask", "chat"):
        print(f"❌ Unknown command: {command}")
        parser.print_help()
        return

    try:
        if command == "chat":
            await cli_chat(args.provider, args.model, args.show_results)
        elif args.server:
            await cli_remote(args.query, args.server, args.show_results)
        else:
            await cli_ask(args.query, args.provider, args.model, args.show_results)
    except ValueError as e:
        # No API key configured for the chosen provider
        print(f"❌ {e}")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
